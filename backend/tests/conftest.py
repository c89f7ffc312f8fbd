"""Pytest configuration for trendlens tests

WHAT: Shared fixtures for the chart engine and the record-store services
WHY: Keeps every test on an isolated in-memory sqlite database and a fixed
     set of day bags, so expected values can be written down by hand
REFERENCES:
    - trendlens/models.py: FoodEntry, ExerciseSet
    - trendlens/dsl/totals.py: DailyTotals
"""

import os
import uuid
from datetime import date, datetime, timezone
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before trendlens reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CHART_TIMEZONE", "UTC")

from trendlens.dsl.totals import DailyTotals, ExerciseDayTotals, FoodDayTotals  # noqa: E402
from trendlens.models import Base, ExerciseSet, FoodEntry  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def test_db_engine():
    """Create in-memory test database engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """Create test database session with rollback."""
    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )

    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


# ============================================================================
# Record Builders
# ============================================================================

def make_food_entry(
    eaten_date: date,
    items,
    created_at: datetime = None,
) -> FoodEntry:
    """Build a FoodEntry; created_at defaults to noon UTC on eaten_date."""
    return FoodEntry(
        id=str(uuid.uuid4()),
        eaten_date=eaten_date,
        created_at=created_at or datetime(eaten_date.year, eaten_date.month, eaten_date.day, 12, tzinfo=timezone.utc),
        food_items=items,
    )


def make_exercise_set(
    logged_date: date,
    exercise_key: str,
    *,
    entry_id: str = None,
    created_at: datetime = None,
    **fields,
) -> ExerciseSet:
    """Build an ExerciseSet; extra keyword arguments map onto columns."""
    return ExerciseSet(
        id=str(uuid.uuid4()),
        entry_id=entry_id,
        logged_date=logged_date,
        created_at=created_at or datetime(logged_date.year, logged_date.month, logged_date.day, 18, tzinfo=timezone.utc),
        exercise_key=exercise_key,
        sets=fields.pop("sets", 1),
        **fields,
    )


# ============================================================================
# DailyTotals Fixtures
# ============================================================================

@pytest.fixture
def three_day_food_totals() -> DailyTotals:
    """Mon 2026-02-16, Tue 2026-02-17, Wed 2026-02-18."""
    return DailyTotals(food={
        "2026-02-16": FoodDayTotals(calories=2000, protein=150, carbs=200, fat=60, fiber=30, entries=3),
        "2026-02-17": FoodDayTotals(calories=1800, protein=120, carbs=180, fat=55, fiber=25, entries=2),
        "2026-02-18": FoodDayTotals(calories=2200, protein=160, carbs=240, fat=70, fiber=35, entries=4),
    })


@pytest.fixture
def two_week_exercise_totals() -> DailyTotals:
    """Sat 2026-02-14 through Thu 2026-02-19, spanning ISO weeks 7 and 8."""
    return DailyTotals(exercise={
        "2026-02-14": ExerciseDayTotals(sets=4, duration_minutes=30, calories_burned=250, unique_exercises=2, entries=1),
        "2026-02-15": ExerciseDayTotals(sets=2, duration_minutes=45, calories_burned=400, unique_exercises=1, entries=1),
        "2026-02-16": ExerciseDayTotals(sets=10, duration_minutes=60, calories_burned=300, unique_exercises=3, entries=2),
        "2026-02-19": ExerciseDayTotals(sets=6, duration_minutes=20, calories_burned=150, unique_exercises=2, entries=1),
    })
