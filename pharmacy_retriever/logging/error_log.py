from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-run error log for the pharmacy retriever.

Two kinds of entries end up here: pharmacies dropped in best-effort mode
(GEOCODE_UNRESOLVED, REWARD_TABLE_NOT_FOUND, keyed by prefecture and
pharmacy id) and the single cause of a fatal abort (FETCH_ERROR,
HEADER_NOT_FOUND, SHEET_READ_ERROR, ...). Entries are buffered during the run
and written once by the orchestrator as JSON Lines to
`logs/errors-YYYYMMDD-HHMMSS.log` (UTC), only when there is something to write.
"""

__all__ = [
    "ErrorLogBuffer",
    "ErrorRecord",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Buffer of skipped-record and abort entries, flushed once per run.

    - ファイル名のタイムスタンプは初回アクセス時に確定
    - flush は記録がなければ何も作らず None を返す
    """

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
