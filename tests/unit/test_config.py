"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from src.core.config import Constants, Settings


def test_defaults() -> None:
    """Test default settings values."""
    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "./data/taskboard.db"
    assert settings.cache_sliding_expiration_seconds == 60
    assert settings.overdue_scan_interval_seconds == 120
    assert settings.expose_internal_errors is False
    assert settings.logfire_token is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that settings are read from case-insensitive environment variables."""
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("overdue_scan_interval_seconds", "30")
    monkeypatch.setenv("EXPOSE_INTERNAL_ERRORS", "true")

    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "/tmp/other.db"
    assert settings.overdue_scan_interval_seconds == 30
    assert settings.expose_internal_errors is True


@pytest.mark.parametrize("field", ["cache_sliding_expiration_seconds", "overdue_scan_interval_seconds"])
def test_intervals_must_be_positive(field: str) -> None:
    """Test that zero intervals are rejected."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_max_task_id_is_32_bit() -> None:
    """Test the upper bound for task identifiers."""
    assert Constants.MAX_TASK_ID == 2**31 - 1
