"""
Daily Totals
============

Pre-aggregated, read-only snapshots the chart executor runs against.

WHAT:
    Frozen "day bags" (FoodDayTotals, ExerciseDayTotals), per-label item
    totals, and the DailyTotals container holding them.

WHY frozen:
    The executor is a pure function over DailyTotals. Freezing the bags and
    wrapping every map in MappingProxyType makes "the engine never mutates
    its input" something the runtime enforces, not a convention.

Optional maps:
    food_by_hour, exercise_by_hour, food_by_item, exercise_by_item and
    exercise_by_category are None unless the grouping that needs them was
    requested. None means "not computed"; an empty mapping means "computed,
    no data". The executor treats both as "no points".

Related files:
- trendlens/services/daily_totals_service.py: Builds these from the record store
- trendlens/dsl/executor.py: Reads them
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union


class _Bag:
    """Key-based access shared by every totals type."""

    __slots__ = ()

    # Extra readable keys mapped to attribute names
    _ALIASES: Mapping[str, str] = MappingProxyType({})

    def get(self, key: str) -> Optional[float]:
        """Return the numeric field named `key`, or None if the bag has no such field."""
        attr = self._ALIASES.get(key, key)
        if attr not in self._numeric_fields():
            return None
        return getattr(self, attr)

    @classmethod
    def _numeric_fields(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls) if f.name != "description")

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def plus(self, other):
        """Return a new bag with every numeric field summed."""
        return replace(
            self,
            **{name: getattr(self, name) + getattr(other, name) for name in self._numeric_fields()},
        )


@dataclass(frozen=True)
class FoodDayTotals(_Bag):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    sugar: float = 0
    saturated_fat: float = 0
    sodium: float = 0
    cholesterol: float = 0
    entries: int = 0


@dataclass(frozen=True)
class ExerciseDayTotals(_Bag):
    sets: float = 0
    duration_minutes: float = 0
    distance_miles: float = 0
    calories_burned: float = 0
    unique_exercises: int = 0
    entries: int = 0


@dataclass(frozen=True)
class FoodItemTotals(_Bag):
    """Window totals for one normalized food description."""
    description: str = ""
    count: int = 0
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    sugar: float = 0
    saturated_fat: float = 0
    sodium: float = 0
    cholesterol: float = 0

    _ALIASES = MappingProxyType({"entries": "count"})


@dataclass(frozen=True)
class ExerciseItemTotals(_Bag):
    """Window totals for one exercise key."""
    description: str = ""
    count: int = 0
    sets: float = 0
    duration_minutes: float = 0
    distance_miles: float = 0
    calories_burned: float = 0

    _ALIASES = MappingProxyType({"entries": "count"})


DayBag = Union[FoodDayTotals, ExerciseDayTotals]
ItemBag = Union[FoodItemTotals, ExerciseItemTotals]


def _freeze(mapping):
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


def _freeze_hourly(mapping):
    if mapping is None:
        return None
    return MappingProxyType({int(hour): tuple(bags) for hour, bags in mapping.items()})


@dataclass(frozen=True)
class DailyTotals:
    """
    Composite snapshot consumed by the executor.

    Attributes:
        food: ISO date -> FoodDayTotals, one entry per date with a nutrition entry
        exercise: ISO date -> ExerciseDayTotals, one entry per date with exercise
        food_by_hour: hour 0-23 -> per-entry bags (hourOfDay only)
        exercise_by_hour: hour 0-23 -> per-record bags (hourOfDay only)
        food_by_item: normalized description -> FoodItemTotals (item only)
        exercise_by_item: exercise key -> ExerciseItemTotals (item only)
        exercise_by_category: "Cardio"/"Strength" -> ExerciseDayTotals (category only)
    """
    food: Mapping[str, FoodDayTotals] = field(default_factory=dict)
    exercise: Mapping[str, ExerciseDayTotals] = field(default_factory=dict)
    food_by_hour: Optional[Mapping[int, Tuple[FoodDayTotals, ...]]] = None
    exercise_by_hour: Optional[Mapping[int, Tuple[ExerciseDayTotals, ...]]] = None
    food_by_item: Optional[Mapping[str, FoodItemTotals]] = None
    exercise_by_item: Optional[Mapping[str, ExerciseItemTotals]] = None
    exercise_by_category: Optional[Mapping[str, ExerciseDayTotals]] = None

    def __post_init__(self):
        object.__setattr__(self, "food", _freeze(self.food))
        object.__setattr__(self, "exercise", _freeze(self.exercise))
        object.__setattr__(self, "food_by_hour", _freeze_hourly(self.food_by_hour))
        object.__setattr__(self, "exercise_by_hour", _freeze_hourly(self.exercise_by_hour))
        object.__setattr__(self, "food_by_item", _freeze(self.food_by_item))
        object.__setattr__(self, "exercise_by_item", _freeze(self.exercise_by_item))
        object.__setattr__(self, "exercise_by_category", _freeze(self.exercise_by_category))
