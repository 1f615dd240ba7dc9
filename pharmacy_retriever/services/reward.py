from __future__ import annotations

from collections.abc import Iterable

from ..models.config_models import RewardTable
from ..models.pharmacy import PharmacyRecord

"""Dispensing reward point calculation.

Each accepted notification name found in the record's reward table adds its
points. Names are counted per occurrence; unknown names add nothing.
"""

__all__ = [
    "RewardTableNotFoundError",
    "apply_reward_points",
    "find_reward_table",
]


class RewardTableNotFoundError(Exception):
    pass


def find_reward_table(tables: Iterable[RewardTable], reward_id: str) -> RewardTable:
    for table in tables:
        if table.id == reward_id:
            return table
    raise RewardTableNotFoundError(f"failed to find reward info: {reward_id!r}")


def apply_reward_points(record: PharmacyRecord, tables: Iterable[RewardTable]) -> int:
    """Add the reward points of ``record.facility`` to ``record.point``.

    Returns the updated total.
    """
    table = find_reward_table(tables, record.reward_id)
    for name in record.facility:
        record.point += table.reward.get(name, 0)
    return record.point
