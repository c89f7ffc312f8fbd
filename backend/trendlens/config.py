"""Settings management.

Settings are read from the environment or a local .env file. The chart engine
itself takes no configuration; these values only drive the record-store access
in trendlens/services (database URL, the timezone used to bucket records by hour,
and the default query window).
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment or .env."""

    DATABASE_URL: str = "sqlite:///./trendlens.db"

    # IANA zone used to read created_at timestamps for hourOfDay grouping
    CHART_TIMEZONE: str = "UTC"
    # Window length used when the caller does not pick one (7/30/90 in the UI)
    CHART_DEFAULT_PERIOD_DAYS: int = Field(default=30, ge=1, le=365)

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()  # type: ignore[call-arg]


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger.

    Mirrors the basicConfig call the API entrypoint used to make; scripts and
    workers embedding trendlens call this once at startup.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL))
