"""
Fetch Planner
=============

Converts a ChartDSL into a FetchPlan: which records the aggregation layer
must read and which optional DailyTotals maps it must build.

WHY a planner?
- Separates WHAT (DSL intent) from HOW (record-store reads)
- Keeps the lazy-population rule in one place: a map is only built when
  the grouping that needs it was requested
- Testable without a database

Related files:
- trendlens/dsl/schema.py: Input type (ChartDSL)
- trendlens/services/daily_totals_service.py: Consumes FetchPlan

Design:
- Pure function: DSL -> Plan (no side effects)
- Window end is always "today"; window start is `today - period_days`
- Exercise key/subtype filters are pushed down to the query
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from trendlens.dsl.schema import ChartDSL, ExerciseCategory, GroupBy, Source


@dataclass(frozen=True)
class FetchPlan:
    """
    Low-level read plan for one chart.

    Attributes:
        source: Which record kind to read
        window_start: First date included (inclusive)
        window_end: Last date included (inclusive), informational
        needs_hourly: Build food_by_hour / exercise_by_hour
        needs_items: Build food_by_item / exercise_by_item
        needs_category: Build exercise_by_category
        exercise_key: Push-down filter on exercise identifier
        exercise_subtype: Push-down filter on exercise subtype
        category: Post-fetch filter on Cardio/Strength classification

    Example:
        FetchPlan(
            source=Source.EXERCISE,
            window_start=date(2026, 1, 17),
            window_end=date(2026, 2, 16),
            needs_hourly=False,
            needs_items=True,
            needs_category=False,
            exercise_key=None,
            exercise_subtype=None,
            category=ExerciseCategory.CARDIO,
        )
    """
    source: Source
    window_start: date
    window_end: date
    needs_hourly: bool = False
    needs_items: bool = False
    needs_category: bool = False
    exercise_key: Optional[str] = None
    exercise_subtype: Optional[str] = None
    category: Optional[ExerciseCategory] = None


def build_plan(dsl: ChartDSL, *, period_days: int, today: Optional[date] = None) -> FetchPlan:
    """
    Build a fetch plan from a validated ChartDSL.

    Args:
        dsl: Validated chart DSL
        period_days: Window length in days (7/30/90 in practice, any positive value accepted)
        today: Window end; defaults to date.today()

    Returns:
        FetchPlan for DailyTotalsService.fetch_daily_totals()

    Raises:
        ValueError: period_days is not positive

    Example:
        >>> dsl = ChartDSL(source="food", metric="calories", group_by="hourOfDay", aggregation="average")
        >>> plan = build_plan(dsl, period_days=7, today=date(2026, 2, 18))
        >>> plan.window_start, plan.needs_hourly, plan.needs_items
        (datetime.date(2026, 2, 11), True, False)
    """
    if period_days < 1:
        raise ValueError("period_days must be >= 1")

    end = today or date.today()
    start = end - timedelta(days=period_days)

    chart_filter = dsl.filter
    is_exercise = dsl.source == Source.EXERCISE

    return FetchPlan(
        source=dsl.source,
        window_start=start,
        window_end=end,
        needs_hourly=dsl.group_by == GroupBy.HOUR_OF_DAY,
        needs_items=dsl.group_by == GroupBy.ITEM,
        # Category totals only exist for exercise
        needs_category=is_exercise and dsl.group_by == GroupBy.CATEGORY,
        exercise_key=chart_filter.exercise_key if (chart_filter and is_exercise) else None,
        exercise_subtype=chart_filter.exercise_subtype if (chart_filter and is_exercise) else None,
        category=chart_filter.category if (chart_filter and is_exercise) else None,
    )
