from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import IO

from ..excel.reader import locate_header, normalize_rows, read_sheet_rows
from ..models.config_models import ColumnLayout, SourceDescriptor
from ..models.pharmacy import PharmacyRecord

"""Pharmacy record extraction from normalized spreadsheet rows.

Rows of one pharmacy are listed consecutively, one row per accepted
notification (受理届出). Grouping therefore follows contiguity: a change of the
medical institution number closes the current record, and a number that shows
up again later starts a new one.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "extract_pharmacies",
    "extract_records",
]


def _new_record(row: Sequence[str], source: SourceDescriptor, layout: ColumnLayout) -> PharmacyRecord:
    return PharmacyRecord(
        prefecture_id=row[layout.prefecture_id],
        prefecture=row[layout.prefecture],
        id=row[layout.id],
        name=row[layout.name],
        post_id=row[layout.post_id],
        address=row[layout.address],
        telephone=row[layout.telephone],
        fax=row[layout.fax],
        reward_id=source.reward_id,
        desc=source.desc,
    )


def extract_records(
    rows: Sequence[Sequence[str]],
    header_index: int,
    source: SourceDescriptor,
    layout: ColumnLayout | None = None,
) -> list[PharmacyRecord]:
    """Build PharmacyRecords from the data rows following ``header_index``.

    Rows must already be normalized (see ``normalize_rows``).
    """
    layout = layout or ColumnLayout()
    records: list[PharmacyRecord] = []
    current: PharmacyRecord | None = None
    for row in rows[header_index + 1:]:
        # 薬局以外 (病院・診療所等) は無視
        if row[layout.category] != layout.category_marker:
            continue
        if current is None or current.id != row[layout.id]:
            current = _new_record(row, source, layout)
            records.append(current)
        current.add_facility(row[layout.facility])
    return records


def extract_pharmacies(
    stream: IO[bytes],
    source: SourceDescriptor,
    layout: ColumnLayout | None = None,
) -> list[PharmacyRecord]:
    """Read, normalize and extract one spreadsheet stream."""
    layout = layout or ColumnLayout()
    rows = read_sheet_rows(stream, layout.sheet_name)
    normalize_rows(rows, layout.max_index)
    header_index = locate_header(rows, layout.id, layout.header_marker)
    logger.debug(f"header row found at index {header_index} ({len(rows)} rows)")
    return extract_records(rows, header_index, source, layout)
