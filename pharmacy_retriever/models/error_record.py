from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

This module defines the ErrorRecord dataclass used for structured error logging
in the retriever. ``record_id`` is empty for failures that are not tied to a
single pharmacy (configuration, fetch, spreadsheet level).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Department label or URL being processed
        sheet: Spreadsheet name (zip member name for archives)
        record_id: Medical institution number, empty when unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    sheet: str
    record_id: str  # 医療機関番号。不明な場合は空文字
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        source: str, sheet: str, record_id: str, error_type: str, message: str
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            sheet=sheet,
            record_id=record_id,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
