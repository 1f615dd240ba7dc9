from __future__ import annotations

from collections.abc import Sequence
from typing import IO, Any

import pandas as pd

"""Excel reader for the pharmacy spreadsheets.

The header row floats: bureaus put a variable number of title/notes rows above
it, so the header is located by the marker text in the identifier column
rather than by position. Cells are handled as plain strings throughout.
"""

__all__ = [
    "HeaderNotFoundError",
    "SheetReadError",
    "locate_header",
    "normalize_rows",
    "read_sheet_rows",
]


class SheetReadError(Exception):
    """Raised when the workbook cannot be opened or the sheet is missing."""


class HeaderNotFoundError(Exception):
    """Raised when no row carries the header marker in the identifier column."""


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        # 数値セル (例: 都道府県コード 13.0) は整数表記に戻す
        if value.is_integer():
            return str(int(value))
    if value is pd.NaT:
        return ""
    return str(value)


def read_sheet_rows(stream: IO[bytes], sheet_name: str = "Sheet1") -> list[list[str]]:
    """Read one sheet of an xlsx stream as rows of string cells.

    Parameters
    ----------
    stream: xlsx のバイトストリーム
    sheet_name: 読み込むシート名 (既定 Sheet1)
    """
    try:
        xls = pd.ExcelFile(stream, engine="openpyxl")
    except Exception as e:
        raise SheetReadError(f"failed to open workbook: {e}") from e
    with xls:
        if sheet_name not in xls.sheet_names:
            raise SheetReadError(f"sheet '{sheet_name}' not found (sheets={xls.sheet_names})")
        # ヘッダなしで生読み、NA 変換は行わない
        df = xls.parse(sheet_name, header=None, dtype=object, keep_default_na=False, na_values=[])
    return [[_cell_text(v) for v in raw] for raw in df.itertuples(index=False, name=None)]


def normalize_rows(rows: list[list[str]], min_index: int) -> list[list[str]]:
    """Trim every cell and pad each row so index ``min_index`` is addressable.

    Rows are modified in place and the same list is returned.
    """
    for row in rows:
        for i, cell in enumerate(row):
            row[i] = cell.strip()
        while len(row) <= min_index:
            row.append("")
    return rows


def locate_header(rows: Sequence[Sequence[str]], id_column: int, marker: str) -> int:
    """Return the index of the first row whose ``id_column`` cell equals ``marker``."""
    for i, row in enumerate(rows):
        if len(row) > id_column and row[id_column] == marker:
            return i
    raise HeaderNotFoundError(f"cannot find the header row (column {id_column} == {marker!r})")
