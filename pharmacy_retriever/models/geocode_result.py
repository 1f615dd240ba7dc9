from __future__ import annotations

from dataclasses import dataclass

"""Geocoding result models.

GeocodeCandidate mirrors one ``<candidate>`` element of the geocoder XML.
GeocodeAttempt is the outcome of a single request inside the retry loop:
either coordinates or the reason the attempt failed.
"""

__all__ = [
    "GeocodeAttempt",
    "GeocodeCandidate",
]


@dataclass(frozen=True)
class GeocodeCandidate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeocodeAttempt:
    """Per-attempt result of the geocode retry loop."""
    attempt: int  # 0-based
    candidate: GeocodeCandidate | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.candidate is not None

    @staticmethod
    def success(attempt: int, candidate: GeocodeCandidate) -> GeocodeAttempt:
        return GeocodeAttempt(attempt=attempt, candidate=candidate)

    @staticmethod
    def failure(attempt: int, reason: str) -> GeocodeAttempt:
        return GeocodeAttempt(attempt=attempt, reason=reason)
