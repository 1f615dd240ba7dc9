from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the pharmacy list retriever.

This module defines the domain models that come out of the configuration files
(source list and reward tables) together with the column layout of the
pharmacy spreadsheets. They are separate from the loader implementation in
pharmacy_retriever/config/loader.py and focus on typing and domain modeling.
"""

__all__ = [
    "ColumnLayout",
    "RewardTable",
    "SourceDescriptor",
]


@dataclass(frozen=True)
class SourceDescriptor:
    """One entry of the source list (xls_urls.yml).

    A regional bureau publishes one or more spreadsheets; every pharmacy
    extracted from them inherits ``desc`` and ``reward_id``.
    """
    department: str  # 管轄局
    excel_urls: tuple[str, ...]  # EXCEL (or zip) URL
    reward_id: str  # 調剤報酬テーブル ID
    origin_url: str = ""  # EXCEL へのリンクがあるページ
    desc: str = ""  # 注意書き


@dataclass(frozen=True)
class RewardTable:
    """Point table keyed by facility/authorization name (reward.yml entry)."""
    id: str
    reward: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ColumnLayout:
    """Fixed column bindings of the pharmacy spreadsheet (0-based).

    The defaults follow the layout published by the regional bureaus of
    health and welfare.
    """
    prefecture_id: int = 1  # 都道府県コード
    prefecture: int = 2  # 都道府県名
    category: int = 3  # 区分
    id: int = 4  # 医療機関番号
    name: int = 7  # 医療機関名称
    post_id: int = 8  # 医療機関所在地（郵便番号）
    address: int = 9  # 医療機関所在地（住所）
    telephone: int = 10  # 電話番号
    fax: int = 11  # FAX番号
    facility: int = 13  # 受理届出名称
    header_marker: str = "医療機関番号"
    category_marker: str = "薬局"
    sheet_name: str = "Sheet1"

    @property
    def max_index(self) -> int:
        """Largest column index referenced by the extractor."""
        return max(
            self.prefecture_id,
            self.prefecture,
            self.category,
            self.id,
            self.name,
            self.post_id,
            self.address,
            self.telephone,
            self.fax,
            self.facility,
        )
