from __future__ import annotations

import logging
from collections.abc import Sequence

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import RewardTable
from ..models.error_record import ErrorRecord
from ..models.pharmacy import PharmacyRecord
from .geocode import GeocodeResolver, GeocodeUnresolvedError
from .progress import ProgressTracker
from .reward import RewardTableNotFoundError, apply_reward_points

"""Enrichment pass: coordinates and reward points for every record.

Records are processed one by one in input order. By default the first
unresolvable address or missing reward table aborts the whole pass; with
``best_effort=True`` the offending record is logged and left out instead.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PROGRESS_LOG_INTERVAL",
    "enrich_records",
]

PROGRESS_LOG_INTERVAL = 100


def _enrich_one(record: PharmacyRecord, tables: Sequence[RewardTable], resolver: GeocodeResolver) -> None:
    candidate = resolver.resolve(record.address)
    record.lat = candidate.latitude
    record.lon = candidate.longitude
    apply_reward_points(record, tables)


def enrich_records(
    records: Sequence[PharmacyRecord],
    tables: Sequence[RewardTable],
    resolver: GeocodeResolver,
    *,
    best_effort: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> list[PharmacyRecord]:
    """Geocode and score ``records`` in order.

    Returns the enriched records (all of them unless ``best_effort`` dropped
    some).

    Raises:
        GeocodeUnresolvedError: address could not be resolved (fail-fast mode)
        RewardTableNotFoundError: no table for the record's reward_id (fail-fast mode)
    """
    total = len(records)
    enriched: list[PharmacyRecord] = []
    with ProgressTracker(total, description="Enriching", unit="pharmacy") as progress:
        for i, record in enumerate(records):
            if i % PROGRESS_LOG_INTERVAL == 0 or i == total - 1:
                logger.info(f"{i}/{total} processing")
            try:
                _enrich_one(record, tables, resolver)
            except (GeocodeUnresolvedError, RewardTableNotFoundError) as e:
                if not best_effort:
                    raise
                error_type = (
                    "GEOCODE_UNRESOLVED"
                    if isinstance(e, GeocodeUnresolvedError)
                    else "REWARD_TABLE_NOT_FOUND"
                )
                logger.warning(f"skip {record.id} {record.name}: {e}")
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(
                            source=record.prefecture,
                            sheet="",
                            record_id=record.id,
                            error_type=error_type,
                            message=str(e),
                        )
                    )
            else:
                enriched.append(record)
            progress.advance(record.id)
            progress.set_postfix(skipped=i + 1 - len(enriched))
    return enriched
