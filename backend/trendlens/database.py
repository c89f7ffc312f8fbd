"""Database session and base configuration.

WHAT:
    Provides the SQLAlchemy engine and session factory for the record store.

WHY:
    The aggregation layer reads through a caller-supplied Session; scripts and
    workers that have no session of their own use get_sync_session().

USAGE:
    from trendlens.database import get_sync_session

    with get_sync_session() as db:
        totals = DailyTotalsService(db).fetch_daily_totals(plan)

REFERENCES:
    - trendlens/config.py (DATABASE_URL)
    - trendlens/services/daily_totals_service.py (consumer)
"""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings
from .models import Base  # noqa: F401  (single registry for metadata.create_all)


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

def _get_database_url() -> str:
    """Get DATABASE_URL from the environment, loading .env if needed."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        # Attempt to load from local .env for developer convenience
        from .utils.env import load_env_file
        load_env_file()
        database_url = os.getenv("DATABASE_URL")

    return database_url or get_settings().DATABASE_URL


def create_db_engine(database_url: str) -> Engine:
    """Build an engine; SQLite engines (tests/dev) skip pool sizing."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,      # Recycle connections every hour
        pool_pre_ping=True,     # Validate connections before use
    )


DATABASE_URL = _get_database_url()
engine = create_db_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


# =============================================================================
# CONTEXT MANAGERS
# =============================================================================

@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """Context manager for sessions outside a request scope.

    Example:
        with get_sync_session() as db:
            rows = db.query(FoodEntry).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
