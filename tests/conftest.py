# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest

HEADER_ROW = [
    "No", "都道府県コード", "都道府県名", "区分", "医療機関番号", "併設医療機関番号",
    "医療機関記号番号", "医療機関名称", "医療機関所在地（郵便番号）", "医療機関所在地（住所）",
    "電話番号", "FAX番号", "受理番号", "受理届出名称",
]


def pharmacy_row(
    pid: str,
    facility: str = "",
    *,
    category: str = "薬局",
    name: str | None = None,
    address: str = "東京都千代田区霞が関1-2-2",
) -> list[str]:
    """Build one 14-column row in the published layout."""
    return [
        "1", "13", "東京都", category, pid, "", "",
        name if name is not None else f"{pid}薬局",
        "100-8916", address, "03-1234-5678", "03-1234-5679", "", facility,
    ]


def make_xlsx_bytes(rows: list[list[object]], sheet_name: str = "Sheet1") -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buf.getvalue()


def geocode_xml(*candidates: tuple[float, float]) -> bytes:
    """Geocoder response body for (lat, lon) candidates."""
    parts = ['<?xml version="1.0" encoding="UTF-8"?>', "<results>", "<query>q</query>"]
    for lat, lon in candidates:
        parts.append(
            f"<candidate><address>a</address><longitude>{lon}</longitude>"
            f"<latitude>{lat}</latitude><iLvl>7</iLvl></candidate>"
        )
    parts.append("</results>")
    return "".join(parts).encode("utf-8")


def http_response(content: bytes) -> Mock:
    resp = Mock()
    resp.content = content
    resp.raise_for_status.return_value = None
    return resp


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_sources_yaml() -> str:
    return """- department: 関東信越厚生局
  originURL: https://kouseikyoku.mhlw.go.jp/kantoshinetsu/
  reward_id: "2022"
  excel_url:
    - https://example.jp/kanto/tokyo.xlsx
  desc: 東京都の一部の薬局は掲載されていません
- department: 近畿厚生局
  reward_id: "2022"
  excel_url:
    - https://example.jp/kinki/all.zip
"""


@pytest.fixture()
def sample_reward_yaml() -> str:
    return """- id: "2022"
  reward:
    地域支援体制加算１: 39
    連携強化加算: 2
    在宅患者調剤加算: 15
- id: "2020"
  reward:
    地域支援体制加算: 38
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_sources_yaml: str, sample_reward_yaml: str) -> dict[str, Path]:
    sources = temp_workdir / "xls_urls.yml"
    sources.write_text(sample_sources_yaml, encoding="utf-8")
    rewards = temp_workdir / "reward.yml"
    rewards.write_text(sample_reward_yaml, encoding="utf-8")
    return {"sources": sources, "rewards": rewards}


def fake_session(
    files: dict[str, bytes],
    coordinates: dict[str, tuple[float, float]],
) -> Mock:
    """requests.Session stand-in serving spreadsheets by URL and geocodes by address.

    Addresses missing from ``coordinates`` get an empty candidate list.
    """
    session = Mock()

    def get(url: str, params: dict[str, str] | None = None, timeout: float | None = None) -> Mock:
        if params is not None:
            address = params["addr"]
            if address in coordinates:
                return http_response(geocode_xml(coordinates[address]))
            return http_response(geocode_xml())
        return http_response(files[url])

    session.get.side_effect = get
    return session


@pytest.fixture()
def clean_env(monkeypatch):
    for key in (
        "PHARMACY_SOURCES",
        "PHARMACY_REWARDS",
        "PHARMACY_OUTPUT",
        "PHARMACY_GEOCODE_URL",
        "PHARMACY_GEOCODE_RETRY",
        "PHARMACY_GEOCODE_BACKOFF",
        "PHARMACY_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
