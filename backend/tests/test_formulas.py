"""
Derived Formula Tests
=====================

WHAT: Unit tests for the derived metric formula table.
WHY: Formulas must be total; a zero-macro or zero-entry day must chart as 0,
     never NaN or a ZeroDivisionError.

REFERENCES:
- trendlens/dsl/formulas.py
"""

import math

import pytest

from trendlens.dsl.formulas import DERIVED_FORMULAS, DERIVED_METRICS, round_half_up
from trendlens.dsl.totals import FoodDayTotals, FoodItemTotals


DAY = FoodDayTotals(calories=2000, protein=150, carbs=200, fat=60, fiber=30, entries=3)


def test_table_lists_all_formulas() -> None:
    assert DERIVED_METRICS == {
        "protein_pct", "carbs_pct", "fat_pct", "net_carbs", "cal_per_meal", "protein_per_meal",
    }


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        DERIVED_FORMULAS["protein_pct"] = lambda bag: 0


@pytest.mark.parametrize("name, expected", [
    ("protein_pct", 31),        # 600 / 1940
    ("carbs_pct", 41),          # 800 / 1940
    ("fat_pct", 28),            # 540 / 1940
    ("net_carbs", 170),
    ("cal_per_meal", 667),
    ("protein_per_meal", 50),
])
def test_formulas_on_regular_day(name, expected) -> None:
    assert DERIVED_FORMULAS[name](DAY) == expected


@pytest.mark.parametrize("name", sorted(DERIVED_METRICS))
def test_formulas_are_zero_on_empty_bag(name) -> None:
    value = DERIVED_FORMULAS[name](FoodDayTotals())

    assert value == 0
    assert not math.isnan(value)


def test_macro_shares_are_zero_without_macro_calories() -> None:
    bag = FoodDayTotals(calories=300, entries=1)

    assert [DERIVED_FORMULAS[n](bag) for n in ("protein_pct", "carbs_pct", "fat_pct")] == [0, 0, 0]


def test_net_carbs_is_not_floored() -> None:
    bag = FoodDayTotals(carbs=10, fiber=25)

    assert DERIVED_FORMULAS["net_carbs"](bag) == -15


def test_formulas_accept_plain_dicts_and_item_bags() -> None:
    item = FoodItemTotals(description="Eggs", count=2, calories=280, protein=24)

    assert DERIVED_FORMULAS["cal_per_meal"]({"calories": 900, "entries": 2}) == 450
    assert DERIVED_FORMULAS["protein_per_meal"](item) == 12


@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (-0.5, 0), (2.49, 2)])
def test_round_half_up(value, expected) -> None:
    assert round_half_up(value) == expected
