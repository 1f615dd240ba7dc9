from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from ..models.pharmacy import PharmacyRecord

"""JSON output writer.

The file is written to a temporary sibling and moved into place, so a reader
never sees a half-written pharmacy.json.
"""

__all__ = [
    "OutputError",
    "write_records",
]


class OutputError(Exception):
    pass


def _default_file_mode() -> int:
    # mkstemp は 0600 固定。open() と同じ 0666 & ~umask にそろえる
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_records(records: Iterable[PharmacyRecord], path: Path) -> Path:
    payload = [r.to_output_dict() for r in records]
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise OutputError(f"failed to create a json file: {e}") from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise OutputError(f"failed to encode json: {e}") from e
    return path
