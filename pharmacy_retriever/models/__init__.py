"""Domain models for the pharmacy list retriever.

This package contains the domain model classes used throughout the application:
configuration entries, extracted pharmacy records, geocoding results and run
statistics.
"""

from .config_models import ColumnLayout, RewardTable, SourceDescriptor
from .geocode_result import GeocodeAttempt, GeocodeCandidate
from .pharmacy import PharmacyRecord

__all__ = [
    # Configuration models
    "ColumnLayout",
    "RewardTable",
    "SourceDescriptor",
    # Processing models
    "GeocodeAttempt",
    "GeocodeCandidate",
    "PharmacyRecord",
]
