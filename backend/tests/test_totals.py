"""
Daily Totals Tests
==================

WHAT: Unit tests for the frozen day bags and the DailyTotals container.
WHY: The executor relies on DailyTotals being read-only and on get()
     returning None for keys a bag does not carry.

REFERENCES:
- trendlens/dsl/totals.py
"""

import dataclasses

import pytest

from trendlens.dsl.totals import (
    DailyTotals,
    ExerciseDayTotals,
    ExerciseItemTotals,
    FoodDayTotals,
    FoodItemTotals,
)


def test_get_returns_none_for_unknown_keys() -> None:
    bag = FoodDayTotals(calories=500)

    assert bag.get("calories") == 500
    assert bag.get("sets") is None
    assert FoodItemTotals(description="Rice").get("description") is None


def test_item_entries_alias_count() -> None:
    assert FoodItemTotals(count=4).get("entries") == 4
    assert ExerciseItemTotals(count=2).get("entries") == 2


def test_plus_sums_numeric_fields_and_keeps_description() -> None:
    first = FoodItemTotals(description="Banana", count=1, calories=105)
    second = FoodItemTotals(description="banana", count=1, calories=110)

    total = first.plus(second)

    assert total.description == "Banana"
    assert (total.count, total.calories) == (2, 215)
    assert first.calories == 105


def test_bags_are_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        ExerciseDayTotals().sets = 3


def test_daily_totals_maps_are_read_only() -> None:
    totals = DailyTotals(
        food={"2026-02-16": FoodDayTotals(calories=1)},
        food_by_hour={"8": [FoodDayTotals(calories=1)]},
    )

    with pytest.raises(TypeError):
        totals.food["2026-02-17"] = FoodDayTotals()
    assert isinstance(totals.food_by_hour[8], tuple)


def test_optional_maps_default_to_not_computed() -> None:
    totals = DailyTotals()

    assert dict(totals.food) == {}
    assert totals.food_by_hour is None
    assert totals.food_by_item is None
    assert totals.exercise_by_category is None
