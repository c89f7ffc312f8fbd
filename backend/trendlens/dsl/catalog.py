"""
Chart Catalog
=============

Fixed lookup tables for the chart engine: which metrics each source exposes,
legacy key translation, display colors, and the exercise classification used
for category grouping.

All tables are immutable (frozenset / MappingProxyType) and built once at
import time. The executor receives them as arguments so tests can inject
their own.

Related files:
- trendlens/dsl/formulas.py: Derived metric formulas
- trendlens/dsl/executor.py: Consumes METRIC_COLORS / LEGACY_METRIC_KEYS
- trendlens/services/daily_totals_service.py: Consumes classify_exercise()
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from trendlens.dsl.schema import ExerciseCategory, Source


FOOD_METRICS = frozenset({
    "calories", "protein", "carbs", "fat", "fiber", "sugar",
    "saturated_fat", "sodium", "cholesterol", "entries",
})

EXERCISE_METRICS = frozenset({
    "sets", "duration_minutes", "distance_miles", "calories_burned",
    "unique_exercises", "entries",
})

SOURCE_METRICS: Mapping[Source, frozenset] = MappingProxyType({
    Source.FOOD: FOOD_METRICS,
    Source.EXERCISE: EXERCISE_METRICS,
})


# Saved charts and older translator prompts used abbreviated keys.
# The two schemes are not interchangeable; everything is normalized to the
# spelled-out names before execution.
LEGACY_METRIC_KEYS: Mapping[str, str] = MappingProxyType({
    "cal": "calories",
    "sat_fat": "saturated_fat",
    "chol": "cholesterol",
    "duration": "duration_minutes",
    "distance": "distance_miles",
    "cal_burned": "calories_burned",
})


def normalize_metric_key(metric: str, legacy_keys: Mapping[str, str] = LEGACY_METRIC_KEYS) -> str:
    """Translate a legacy abbreviated metric key; other keys pass through."""
    return legacy_keys.get(metric, metric)


# =============================================================================
# COLORS
# =============================================================================

DEFAULT_COLOR = "#2563EB"

METRIC_COLORS: Mapping[str, str] = MappingProxyType({
    "calories": "#2563EB",
    "protein": "#115E83",
    "carbs": "#00B4D8",
    "fat": "#90E0EF",
    "sets": "#7C3AED",
    "duration_minutes": "#7C3AED",
    "distance_miles": "#7C3AED",
    "calories_burned": "#7C3AED",
})


# =============================================================================
# EXERCISES
# =============================================================================

CARDIO_EXERCISES = frozenset({
    "walk_run", "cycling", "elliptical", "rowing",
    "stair_climber", "swimming", "jump_rope",
})

EXERCISE_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    # Upper body - push
    "bench_press": "Bench press",
    "incline_bench_press": "Incline bench press",
    "decline_bench_press": "Decline bench press",
    "dumbbell_press": "Dumbbell press",
    "chest_fly": "Chest fly",
    "shoulder_press": "Shoulder press",
    "lateral_raise": "Lateral raise",
    "tricep_pushdown": "Tricep pushdown",
    "dips": "Dips",
    # Upper body - pull
    "lat_pulldown": "Lat pulldown",
    "pull_up": "Pull-up",
    "seated_row": "Seated row",
    "bent_over_row": "Bent-over row",
    "dumbbell_row": "Dumbbell row",
    "face_pull": "Face pull",
    "bicep_curl": "Bicep curl",
    "hammer_curl": "Hammer curl",
    # Lower body
    "squat": "Squat",
    "front_squat": "Front squat",
    "leg_press": "Leg press",
    "leg_extension": "Leg extension",
    "leg_curl": "Leg curl",
    "romanian_deadlift": "Romanian deadlift",
    "hip_thrust": "Hip thrust",
    "calf_raise": "Calf raise",
    "lunge": "Lunge",
    # Compound
    "deadlift": "Deadlift",
    "kettlebell_swing": "Kettlebell swing",
    # Core
    "plank": "Plank",
    "crunch": "Crunch",
    # Cardio
    "walk_run": "Walk/run",
    "cycling": "Cycling",
    "elliptical": "Elliptical",
    "rowing": "Rowing",
    "stair_climber": "Stair climber",
    "swimming": "Swimming",
    "jump_rope": "Jump rope",
    # Other
    "functional_strength": "Functional strength",
})


def exercise_display_name(exercise_key: str, display_names: Mapping[str, str] = EXERCISE_DISPLAY_NAMES) -> str:
    """Human-friendly exercise name with a `snake_case -> snake case` fallback."""
    return display_names.get(exercise_key) or exercise_key.replace("_", " ")


def classify_exercise(exercise_key: Optional[str]) -> ExerciseCategory:
    """Cardio for the known cardio keys, Strength for everything else."""
    if exercise_key in CARDIO_EXERCISES:
        return ExerciseCategory.CARDIO
    return ExerciseCategory.STRENGTH
