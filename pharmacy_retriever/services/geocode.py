from __future__ import annotations

import logging
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import Any

import requests
from tenacity import Retrying, RetryCallState, retry_if_result, stop_after_attempt, wait_incrementing

from ..config.loader import DEFAULT_GEOCODE_BACKOFF, DEFAULT_GEOCODE_RETRY, DEFAULT_GEOCODE_URL
from ..models.geocode_result import GeocodeAttempt, GeocodeCandidate

"""Address -> latitude/longitude resolution.

Uses the CSIS simple geocoder (HTTP GET ``?addr=...``, XML response with zero
or more ``<candidate>`` elements). The service is rate limited and flaky, so
each address gets a bounded number of attempts, driven by tenacity, with a
linear backoff: attempt ``i`` (0-based) waits ``backoff * i`` seconds before
the request.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "GeocodeDecodeError",
    "GeocodeResolver",
    "GeocodeUnresolvedError",
    "parse_geocode_response",
]


class GeocodeDecodeError(Exception):
    """Raised when the geocoder response is not the expected XML."""


class GeocodeUnresolvedError(Exception):
    """Raised when every attempt for an address failed."""

    def __init__(self, address: str, attempts: list[GeocodeAttempt]) -> None:
        self.address = address
        self.attempts = attempts
        self.last_reason = attempts[-1].reason if attempts else None
        super().__init__(
            f"failed to geocode {address!r} after {len(attempts)} attempts: {self.last_reason}"
        )


def parse_geocode_response(body: bytes | str) -> list[GeocodeCandidate]:
    """Parse the geocoder XML into candidates, in document order."""
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, ValueError) as e:
        raise GeocodeDecodeError(f"invalid xml: {e}") from e
    candidates: list[GeocodeCandidate] = []
    for node in root.iter("candidate"):
        lon = node.findtext("longitude")
        lat = node.findtext("latitude")
        try:
            candidates.append(GeocodeCandidate(latitude=float(lat), longitude=float(lon)))
        except (TypeError, ValueError) as e:
            raise GeocodeDecodeError(f"invalid coordinate lat={lat!r} lon={lon!r}") from e
    return candidates


class GeocodeResolver:
    """Resolve addresses with bounded retry and linear backoff."""

    def __init__(
        self,
        url: str = DEFAULT_GEOCODE_URL,
        *,
        retry: int = DEFAULT_GEOCODE_RETRY,
        backoff: float = DEFAULT_GEOCODE_BACKOFF,
        timeout: float | None = 30.0,
        session: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retry < 1:
            raise ValueError(f"retry must be >= 1: {retry}")
        self.url = url
        self.retry = retry
        self.backoff = backoff
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.sleep = sleep
        self.total_attempts = 0

    def _attempt(self, address: str, attempt: int) -> GeocodeAttempt:
        self.total_attempts += 1
        try:
            resp = self.session.get(self.url, params={"addr": address}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            return GeocodeAttempt.failure(attempt, f"request failed: {e}")
        try:
            candidates = parse_geocode_response(resp.content)
        except GeocodeDecodeError as e:
            return GeocodeAttempt.failure(attempt, f"decode failed: {e}")
        if not candidates:
            return GeocodeAttempt.failure(attempt, "no candidate")
        return GeocodeAttempt.success(attempt, candidates[0])

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> GeocodeResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def resolve(self, address: str) -> GeocodeCandidate:
        """Return the first candidate for ``address``.

        Raises:
            GeocodeUnresolvedError: when all ``retry`` attempts failed.
        """
        attempts: list[GeocodeAttempt] = []

        def _log_failure(state: RetryCallState) -> None:
            result: GeocodeAttempt = state.outcome.result()
            attempts.append(result)
            logger.warning(f"geocode retry {result.attempt}: {address} ({result.reason})")

        def _give_up(state: RetryCallState) -> None:
            raise GeocodeUnresolvedError(address, attempts)

        retrying = Retrying(
            stop=stop_after_attempt(self.retry),
            # 2 回目以降: backoff, 2*backoff, ...
            wait=wait_incrementing(start=self.backoff, increment=self.backoff),
            retry=retry_if_result(lambda a: not a.ok),
            sleep=self.sleep,
            after=_log_failure,
            retry_error_callback=_give_up,
        )
        # attempts は失敗ごとに after で積まれるので、その長さが次の試行番号
        result = retrying(lambda: self._attempt(address, len(attempts)))
        return result.candidate
