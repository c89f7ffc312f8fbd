from __future__ import annotations

from datetime import date
from typing import Tuple

# Indexed by the Sunday-based weekday number used by the DSL (0=Sun ... 6=Sat)
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# Canonical emission order for dayOfWeek buckets: Mon -> Sun
WEEKDAY_ORDER = (1, 2, 3, 4, 5, 6, 0)

WEEKEND_DAYS = frozenset({0, 6})

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

HOUR_LABELS = (
    "12am", "1am", "2am", "3am", "4am", "5am", "6am", "7am",
    "8am", "9am", "10am", "11am", "12pm", "1pm", "2pm", "3pm",
    "4pm", "5pm", "6pm", "7pm", "8pm", "9pm", "10pm", "11pm",
)


def parse_iso_date(date_str: str) -> date:
    return date.fromisoformat(date_str)


def day_of_week(date_str: str) -> int:
    """Sunday-based weekday (0=Sun ... 6=Sat) of an ISO date string."""
    # date.weekday() is Monday-based (0=Mon ... 6=Sun)
    return (parse_iso_date(date_str).weekday() + 1) % 7


def is_weekend(date_str: str) -> bool:
    return day_of_week(date_str) in WEEKEND_DAYS


def iso_week_key(date_str: str) -> Tuple[int, int]:
    """(ISO year, ISO week) - sorts chronologically."""
    iso = parse_iso_date(date_str).isocalendar()
    return iso[0], iso[1]


def week_label(key: Tuple[int, int]) -> str:
    """e.g. (2026, 8) -> '2026-W08'."""
    return f"{key[0]}-W{key[1]:02d}"


def month_day_label(date_str: str) -> str:
    """e.g. '2026-02-16' -> 'Feb 16'."""
    d = parse_iso_date(date_str)
    return f"{MONTH_ABBR[d.month - 1]} {d.day}"


def hour_label(hour: int) -> str:
    return HOUR_LABELS[hour]
