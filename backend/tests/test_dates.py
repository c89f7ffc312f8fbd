"""Unit tests for the calendar helpers used by the grouping strategies."""

import pytest

from trendlens.dsl import dates


@pytest.mark.parametrize("day, expected", [
    ("2026-02-15", 0),  # Sunday
    ("2026-02-16", 1),
    ("2026-02-21", 6),
])
def test_day_of_week_is_sunday_based(day, expected) -> None:
    assert dates.day_of_week(day) == expected


def test_week_key_and_label() -> None:
    assert dates.iso_week_key("2026-02-16") == (2026, 8)
    assert dates.week_label((2026, 8)) == "2026-W08"
    # Jan 1st 2027 is a Friday and belongs to the last ISO week of 2026
    assert dates.iso_week_key("2027-01-01") == (2026, 53)


def test_labels() -> None:
    assert dates.month_day_label("2026-02-06") == "Feb 6"
    assert dates.hour_label(0) == "12am"
    assert dates.hour_label(12) == "12pm"
    assert dates.hour_label(23) == "11pm"
    assert dates.is_weekend("2026-02-14")
