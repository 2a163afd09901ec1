"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.core.cache_client import task_cache
from src.core.config import settings


@pytest.fixture(autouse=True)
def reset_task_cache() -> Generator[None, None, None]:
    """Start and finish every test with an empty task list cache."""
    task_cache.invalidate()
    yield
    task_cache.invalidate()


@pytest.fixture
def sqlite_db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the store at a fresh SQLite file in a temporary directory."""
    db_path = tmp_path / "data" / "taskboard.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))
    return db_path


@pytest.fixture
def expose_internal_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Return raw internal error text to clients for the duration of a test."""
    monkeypatch.setattr(settings, "expose_internal_errors", True)
