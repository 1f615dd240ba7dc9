from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

import requests

"""Download of the published pharmacy spreadsheets.

Bureaus publish either a bare ``.xlsx`` or a ``.zip`` holding several ``.xlsx``
files (one per prefecture). Zip member names are usually Shift_JIS without the
UTF-8 flag.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "FetchError",
    "SourceFetcher",
    "SpreadsheetStream",
    "url_extension",
]

ZIP_NAME_ENCODING = "shift_jis"


class FetchError(Exception):
    pass


@dataclass
class SpreadsheetStream:
    name: str  # URL のファイル名、zip ならメンバー名
    data: io.BytesIO


def url_extension(url: str) -> str:
    return PurePosixPath(urlparse(url).path).suffix.lower()


def _unpack_zip(content: bytes) -> list[SpreadsheetStream]:
    try:
        with zipfile.ZipFile(io.BytesIO(content), metadata_encoding=ZIP_NAME_ENCODING) as zf:
            streams = []
            for info in zf.infolist():
                if info.is_dir() or PurePosixPath(info.filename).suffix.lower() != ".xlsx":
                    continue
                logger.info(f"    zip member: {info.filename}")
                streams.append(SpreadsheetStream(info.filename, io.BytesIO(zf.read(info))))
            return streams
    except (zipfile.BadZipFile, UnicodeDecodeError) as e:
        raise FetchError(f"failed to read zip archive: {e}") from e


class SourceFetcher:
    """Fetch spreadsheet locators into in-memory xlsx streams."""

    def __init__(self, *, timeout: float | None = 30.0, session: Any = None) -> None:
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> SourceFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, url: str) -> bytes:
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"failed to get {url}: {e}") from e
        return resp.content

    def fetch(self, url: str) -> list[SpreadsheetStream]:
        ext = url_extension(url)
        if ext not in (".xlsx", ".zip"):
            raise FetchError(f"unknown extension {ext!r}: {url}")
        content = self._get(url)
        if ext == ".xlsx":
            name = PurePosixPath(urlparse(url).path).name
            return [SpreadsheetStream(name, io.BytesIO(content))]
        return _unpack_zip(content)
