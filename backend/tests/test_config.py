"""Unit tests for settings loading and database URL resolution."""

import pytest
from pydantic import ValidationError

from trendlens.config import Settings
from trendlens.database import create_db_engine, get_sync_session


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CHART_TIMEZONE", raising=False)
    monkeypatch.delenv("CHART_DEFAULT_PERIOD_DAYS", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.CHART_TIMEZONE == "UTC"
    assert settings.CHART_DEFAULT_PERIOD_DAYS == 30
    assert settings.LOG_LEVEL == "INFO"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("CHART_TIMEZONE", "Europe/Amsterdam")
    monkeypatch.setenv("CHART_DEFAULT_PERIOD_DAYS", "90")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.CHART_TIMEZONE == "Europe/Amsterdam"
    assert settings.CHART_DEFAULT_PERIOD_DAYS == 90
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("name, value", [
    ("LOG_LEVEL", "chatty"),
    ("CHART_DEFAULT_PERIOD_DAYS", "0"),
])
def test_settings_reject_invalid_values(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_sqlite_engine_and_session() -> None:
    engine = create_db_engine("sqlite:///:memory:")
    assert engine.dialect.name == "sqlite"

    with get_sync_session() as db:
        assert db.bind is not None


def test_configure_logging_applies_level(monkeypatch) -> None:
    import logging

    from trendlens.config import configure_logging

    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    configure_logging(Settings(_env_file=None, LOG_LEVEL="warning"))

    assert calls["level"] == logging.WARNING
