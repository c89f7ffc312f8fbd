"""SQLAlchemy ORM models for the record store.

Two record kinds feed the charts: nutrition entries (one row per logged meal,
with its food items in a JSON column) and exercise sets (one row per logged
set/row, grouped into entries by `entry_id`).

trendlens only reads these tables; writes belong to the logging app.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, JSON, String
from sqlalchemy.orm import declarative_base


# Single Base used by the entire application
Base = declarative_base()


def _uuid_str() -> str:
    return str(uuid.uuid4())


class FoodEntry(Base):
    """A logged meal.

    `food_items` is a JSON list of items, each carrying calories, protein,
    carbs, fiber, sugar, fat, saturated_fat, sodium, cholesterol and a
    free-text `description`.
    """
    __tablename__ = "food_entries"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    eaten_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    food_items = Column(JSON, nullable=False, default=list)

    def __str__(self):
        return f"FoodEntry({self.eaten_date}, {len(self.food_items or [])} items)"


class ExerciseSet(Base):
    """A logged exercise set (strength) or session row (cardio).

    Rows logged together share an `entry_id`. `exercise_metadata` is an
    optional JSON bag (calories_burned, heart_rate, effort, ...); the
    calories_burned value is produced by the calorie-burn model upstream.
    """
    __tablename__ = "exercise_sets"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    entry_id = Column(String(36), nullable=True)
    logged_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    exercise_key = Column(String, nullable=False)  # canonical snake_case id, e.g. "bench_press"
    exercise_subtype = Column(String, nullable=True)  # e.g. "running", "indoor"
    description = Column(String, nullable=True)

    sets = Column(Integer, nullable=False, default=1)
    duration_minutes = Column(Float, nullable=True)
    distance_miles = Column(Float, nullable=True)
    exercise_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_exercise_sets_key_date", "exercise_key", "logged_date"),
    )

    def __str__(self):
        return f"ExerciseSet({self.logged_date}, {self.exercise_key})"
