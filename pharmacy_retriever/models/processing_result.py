from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

"""Processing result models for the pharmacy list retriever.

This module defines the models for aggregating per-spreadsheet statistics and
the overall run result used for the SUMMARY output line.
"""


@dataclass(frozen=True)
class SpreadsheetStat:
    """Per-spreadsheet extraction statistics."""
    department: str  # 管轄局
    name: str  # ファイル名 (zip 内ならメンバー名)
    records: int  # 抽出薬局数


@dataclass(frozen=True)
class RunResult:
    """Aggregated result of one retriever run."""
    sources: int  # 処理した SourceDescriptor 数
    spreadsheets: int  # 読み込んだ EXCEL 数
    records: int  # 出力薬局数
    geocode_attempts: int  # ジオコーディング要求の総数 (リトライ込み)
    skipped_records: int  # best-effort モードで除外した件数
    output_path: Path | None
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    spreadsheet_stats: list[SpreadsheetStat] | None = None
