"""
Daily Totals Service
====================

Reads nutrition entries and exercise sets from the record store and folds
them into the DailyTotals snapshot the chart executor consumes.

WHAT: Record store -> per-date day bags (+ optional hourly/item/category maps)
WHY: The executor is pure and never touches the store; every read happens here
HOW: One SQLAlchemy query per fetch, folded in Python

Design Principles:
- Lazy population: optional maps are built only when the FetchPlan asks
- Exercise key/subtype filters are pushed into the SQL query; the
  Cardio/Strength filter is applied after fetch via the exercise catalog
- Store errors (SQLAlchemyError) propagate unchanged
- Malformed food_items payloads contribute nothing instead of failing

Usage:
    >>> service = DailyTotalsService(db)
    >>> totals = service.fetch_daily_totals(plan)
    >>> totals.food["2026-02-16"].calories
    2000

References:
- trendlens/dsl/planner.py: FetchPlan
- trendlens/dsl/totals.py: DailyTotals and the day bags
- trendlens/models.py: FoodEntry, ExerciseSet
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional, Set, Union
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from trendlens import models
from trendlens.config import get_settings
from trendlens.dsl.catalog import classify_exercise, exercise_display_name
from trendlens.dsl.planner import FetchPlan
from trendlens.dsl.schema import ChartFilter, ExerciseCategory, GroupBy, Source
from trendlens.dsl.totals import (
    DailyTotals,
    ExerciseDayTotals,
    ExerciseItemTotals,
    FoodDayTotals,
    FoodItemTotals,
)

logger = logging.getLogger(__name__)


# food_items field -> FoodDayTotals field (identical under the spelled-out naming)
FOOD_ITEM_FIELDS = (
    "calories", "protein", "carbs", "fat", "fiber",
    "sugar", "saturated_fat", "sodium", "cholesterol",
)


def _number(value: Any) -> float:
    """Coerce a JSON value to a finite float; anything else counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


class _ExerciseDay:
    """Mutable per-date accumulator; distinct counts need sets, not sums."""

    __slots__ = ("sets", "duration_minutes", "distance_miles", "calories_burned", "keys", "entry_ids")

    def __init__(self):
        self.sets = 0
        self.duration_minutes = 0.0
        self.distance_miles = 0.0
        self.calories_burned = 0.0
        self.keys: Set[str] = set()
        self.entry_ids: Set[str] = set()

    def add(self, row: models.ExerciseSet, calories_burned: float) -> None:
        self.sets += 1
        self.duration_minutes += _number(row.duration_minutes)
        self.distance_miles += _number(row.distance_miles)
        self.calories_burned += calories_burned
        self.keys.add(row.exercise_key)
        # Rows without a group id count as their own entry
        self.entry_ids.add(str(row.entry_id or row.id))

    def freeze(self) -> ExerciseDayTotals:
        return ExerciseDayTotals(
            sets=self.sets,
            duration_minutes=self.duration_minutes,
            distance_miles=self.distance_miles,
            calories_burned=self.calories_burned,
            unique_exercises=len(self.keys),
            entries=len(self.entry_ids),
        )


class DailyTotalsService:
    """
    Aggregation layer between the record store and the chart executor.

    Attributes:
        db: SQLAlchemy session (caller-owned; never committed or closed here)
        tz: Timezone used to derive hour-of-day from created_at
    """

    def __init__(self, db: Session, tz: Optional[Union[str, tzinfo]] = None):
        self.db = db
        if tz is None:
            tz = get_settings().CHART_TIMEZONE
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch_daily_totals(self, plan: FetchPlan) -> DailyTotals:
        """
        Build the DailyTotals snapshot for one fetch plan.

        Args:
            plan: Output of build_plan()

        Returns:
            DailyTotals with only the plan's source populated. Optional maps
            are None unless the plan requested them.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: the store read failed
        """
        if plan.source == Source.FOOD:
            return self._fetch_food(plan)
        return self._fetch_exercise(plan)

    def aggregate(
        self,
        source: Union[Source, str],
        window_start: date,
        *,
        group_by: Union[GroupBy, str, None] = None,
        filter: Optional[ChartFilter] = None,
    ) -> DailyTotals:
        """
        Convenience form of fetch_daily_totals() without a ChartDSL.

        Example:
            >>> service.aggregate("exercise", date(2026, 2, 1), group_by="item")
        """
        source = Source(source)
        group_by = GroupBy(group_by) if group_by is not None else None
        is_exercise = source == Source.EXERCISE
        plan = FetchPlan(
            source=source,
            window_start=window_start,
            window_end=date.today(),
            needs_hourly=group_by == GroupBy.HOUR_OF_DAY,
            needs_items=group_by == GroupBy.ITEM,
            needs_category=is_exercise and group_by == GroupBy.CATEGORY,
            exercise_key=filter.exercise_key if (filter and is_exercise) else None,
            exercise_subtype=filter.exercise_subtype if (filter and is_exercise) else None,
            category=filter.category if (filter and is_exercise) else None,
        )
        return self.fetch_daily_totals(plan)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _hour_of(self, created_at: Optional[datetime]) -> Optional[int]:
        if created_at is None:
            return None
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at.astimezone(self.tz).hour

    # ------------------------------------------------------------------
    # Food
    # ------------------------------------------------------------------

    def _fetch_food(self, plan: FetchPlan) -> DailyTotals:
        rows = (
            self.db.query(models.FoodEntry)
            .filter(models.FoodEntry.eaten_date >= plan.window_start)
            .order_by(models.FoodEntry.eaten_date.asc(), models.FoodEntry.created_at.asc())
            .all()
        )

        food: Dict[str, FoodDayTotals] = {}
        food_by_hour: Optional[Dict[int, List[FoodDayTotals]]] = defaultdict(list) if plan.needs_hourly else None
        food_by_item: Optional[Dict[str, FoodItemTotals]] = {} if plan.needs_items else None
        skipped = 0

        for row in rows:
            items = row.food_items
            if not isinstance(items, list):
                skipped += 1
                continue

            entry_sums = dict.fromkeys(FOOD_ITEM_FIELDS, 0.0)
            for item in items:
                if not isinstance(item, dict):
                    continue
                for name in FOOD_ITEM_FIELDS:
                    entry_sums[name] += _number(item.get(name))
                if food_by_item is not None:
                    self._fold_food_item(food_by_item, item)

            entry = FoodDayTotals(entries=1, **entry_sums)
            day = row.eaten_date.isoformat()
            food[day] = food[day].plus(entry) if day in food else entry

            if food_by_hour is not None:
                hour = self._hour_of(row.created_at)
                if hour is not None:
                    food_by_hour[hour].append(entry)

        logger.info(
            f"[DAILY_TOTALS] food since {plan.window_start}: {len(rows)} entries, "
            f"{len(food)} days, skipped={skipped}, hourly={food_by_hour is not None}, "
            f"items={len(food_by_item) if food_by_item is not None else None}"
        )

        return DailyTotals(
            food=food,
            food_by_hour=food_by_hour,
            food_by_item=food_by_item,
        )

    @staticmethod
    def _fold_food_item(food_by_item: Dict[str, FoodItemTotals], item: Dict[str, Any]) -> None:
        description = item.get("description")
        if not isinstance(description, str) or not description.strip():
            return
        key = description.strip().lower()
        current = FoodItemTotals(
            description=description.strip(),
            count=1,
            **{name: _number(item.get(name)) for name in FOOD_ITEM_FIELDS},
        )
        existing = food_by_item.get(key)
        # plus() keeps the first-seen description
        food_by_item[key] = existing.plus(current) if existing is not None else current

    # ------------------------------------------------------------------
    # Exercise
    # ------------------------------------------------------------------

    def _fetch_exercise(self, plan: FetchPlan) -> DailyTotals:
        query = (
            self.db.query(models.ExerciseSet)
            .filter(models.ExerciseSet.logged_date >= plan.window_start)
        )
        if plan.exercise_key:
            query = query.filter(models.ExerciseSet.exercise_key == plan.exercise_key)
        if plan.exercise_subtype:
            query = query.filter(models.ExerciseSet.exercise_subtype == plan.exercise_subtype)
        rows = query.order_by(
            models.ExerciseSet.logged_date.asc(), models.ExerciseSet.created_at.asc()
        ).all()

        category = ExerciseCategory(plan.category) if plan.category is not None else None
        if category is not None:
            rows = [row for row in rows if classify_exercise(row.exercise_key) == category]

        days: Dict[str, _ExerciseDay] = {}
        by_hour: Optional[Dict[int, List[ExerciseDayTotals]]] = defaultdict(list) if plan.needs_hourly else None
        by_item: Optional[Dict[str, ExerciseItemTotals]] = {} if plan.needs_items else None
        by_category: Optional[Dict[str, _ExerciseDay]] = {} if plan.needs_category else None

        for row in rows:
            meta = row.exercise_metadata if isinstance(row.exercise_metadata, dict) else {}
            calories_burned = _number(meta.get("calories_burned"))

            day = row.logged_date.isoformat()
            days.setdefault(day, _ExerciseDay()).add(row, calories_burned)

            if by_hour is not None:
                hour = self._hour_of(row.created_at)
                if hour is not None:
                    by_hour[hour].append(ExerciseDayTotals(
                        sets=1,
                        duration_minutes=_number(row.duration_minutes),
                        distance_miles=_number(row.distance_miles),
                        calories_burned=calories_burned,
                        unique_exercises=1,
                        entries=1,
                    ))

            if by_item is not None:
                current = ExerciseItemTotals(
                    description=exercise_display_name(row.exercise_key),
                    count=1,
                    sets=1,
                    duration_minutes=_number(row.duration_minutes),
                    distance_miles=_number(row.distance_miles),
                    calories_burned=calories_burned,
                )
                existing = by_item.get(row.exercise_key)
                by_item[row.exercise_key] = existing.plus(current) if existing is not None else current

            if by_category is not None:
                label = classify_exercise(row.exercise_key).value
                by_category.setdefault(label, _ExerciseDay()).add(row, calories_burned)

        logger.info(
            f"[DAILY_TOTALS] exercise since {plan.window_start}: {len(rows)} sets, "
            f"{len(days)} days, key={plan.exercise_key}, subtype={plan.exercise_subtype}, "
            f"category={category.value if category else None}"
        )

        return DailyTotals(
            exercise={day: acc.freeze() for day, acc in days.items()},
            exercise_by_hour=by_hour,
            exercise_by_item=by_item,
            exercise_by_category=(
                {label: acc.freeze() for label, acc in by_category.items()}
                if by_category is not None else None
            ),
        )
