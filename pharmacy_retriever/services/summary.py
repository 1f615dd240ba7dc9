from __future__ import annotations

from ..models.processing_result import RunResult

"""Summary line rendering service.

Format:
SUMMARY sources={n} spreadsheets={n} pharmacies={n} geocode_attempts={n}
skipped={n} elapsed_sec={elapsed}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.2f}"


def render_summary_line(result: RunResult) -> str:
    """Render a SUMMARY line from RunResult.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     sources=2, spreadsheets=3, records=120, geocode_attempts=125,
        ...     skipped_records=0, output_path=None, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY sources=2 spreadsheets=3 pharmacies=120 geocode_attempts=125 skipped=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY sources={result.sources} "
        f"spreadsheets={result.spreadsheets} "
        f"pharmacies={result.records} "
        f"geocode_attempts={result.geocode_attempts} "
        f"skipped={result.skipped_records} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
