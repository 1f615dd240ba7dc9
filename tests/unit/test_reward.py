from __future__ import annotations

import pytest

from pharmacy_retriever.models.config_models import RewardTable
from pharmacy_retriever.models.pharmacy import PharmacyRecord
from pharmacy_retriever.services.reward import (
    RewardTableNotFoundError,
    apply_reward_points,
    find_reward_table,
)

TABLES = [
    RewardTable(id="K1", reward={"AuthA": 10, "AuthB": 5}),
    RewardTable(id="K2", reward={"AuthA": 1}),
    RewardTable(id="K1", reward={"AuthA": 1000}),
]


def _record(reward_id: str, facility: list[str]) -> PharmacyRecord:
    return PharmacyRecord(
        prefecture_id="13", prefecture="東京都", id="A", name="n", post_id="", address="",
        telephone="", fax="", facility=facility, reward_id=reward_id,
    )


def test_duplicates_counted_and_unknown_names_ignored():
    record = _record("K1", ["AuthA", "AuthC", "AuthA"])
    assert apply_reward_points(record, TABLES) == 20
    assert record.point == 20


def test_first_matching_table_wins():
    assert find_reward_table(TABLES, "K1").reward["AuthA"] == 10


def test_no_facility_gives_zero():
    record = _record("K2", [])
    assert apply_reward_points(record, TABLES) == 0


def test_points_accumulate_on_existing_total():
    record = _record("K2", ["AuthA"])
    record.point = 3
    assert apply_reward_points(record, TABLES) == 4


def test_missing_table():
    record = _record("K9", ["AuthA"])
    with pytest.raises(RewardTableNotFoundError):
        apply_reward_points(record, TABLES)
    assert record.point == 0
