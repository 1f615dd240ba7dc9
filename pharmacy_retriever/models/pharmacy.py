from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""PharmacyRecord model.

One record per contiguous run of spreadsheet rows sharing the same medical
institution number. Extraction fills the fixed columns and the facility list,
enrichment sets the coordinates and the point total.
"""

__all__ = [
    "OUTPUT_FIELDS",
    "PharmacyRecord",
]

# 出力 JSON のキー順
OUTPUT_FIELDS = (
    "prefecture_id",
    "prefecture",
    "id",
    "name",
    "post_id",
    "address",
    "telephone",
    "fax",
    "facility",
    "point",
    "lat",
    "lon",
    "desc",
)


@dataclass
class PharmacyRecord:
    prefecture_id: str
    prefecture: str
    id: str
    name: str
    post_id: str
    address: str
    telephone: str
    fax: str
    facility: list[str] = field(default_factory=list)  # 受理届出名称 (挿入順)
    reward_id: str = ""
    desc: str = ""
    point: int = 0
    lat: float = 0.0
    lon: float = 0.0

    def add_facility(self, name: str) -> None:
        if name:
            self.facility.append(name)

    def to_output_dict(self) -> dict[str, Any]:
        """Serialize to the published JSON shape.

        ``reward_id`` is internal and never written; ``desc`` is omitted when
        empty.
        """
        out: dict[str, Any] = {}
        for key in OUTPUT_FIELDS:
            value = getattr(self, key)
            if key == "desc" and not value:
                continue
            if key == "facility":
                value = list(value)
            out[key] = value
        return out
