"""Pytest configuration and fixtures for unit tests."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from src.core import clock, db_client
from src.main import app
from tests.unit.mocks import TODAY, FailingTaskStore, InMemoryTaskStore


_STORE_FUNCTIONS = (
    "session",
    "fetch_task",
    "fetch_tasks",
    "fetch_overdue_candidates",
    "insert_task",
    "update_task",
    "delete_task",
)


def _patch_store(monkeypatch: pytest.MonkeyPatch, store: InMemoryTaskStore) -> InMemoryTaskStore:
    for name in _STORE_FUNCTIONS:
        monkeypatch.setattr(db_client, name, getattr(store, name))
    return store


@pytest.fixture
def today(monkeypatch: pytest.MonkeyPatch) -> date:
    """Freeze the service clock at a fixed date."""
    monkeypatch.setattr(clock, "today", lambda: TODAY)
    return TODAY


@pytest.fixture
def in_memory_store() -> InMemoryTaskStore:
    """Provides a fresh InMemoryTaskStore for each test."""
    return InMemoryTaskStore()


@pytest.fixture
def patched_store(monkeypatch: pytest.MonkeyPatch, in_memory_store: InMemoryTaskStore) -> InMemoryTaskStore:
    """Route every db_client store call to the in-memory store."""
    return _patch_store(monkeypatch, in_memory_store)


@pytest.fixture
def failing_store(monkeypatch: pytest.MonkeyPatch) -> FailingTaskStore:
    """Route store calls to a store whose writes always fail."""
    return _patch_store(monkeypatch, FailingTaskStore())


@pytest.fixture
def client(patched_store: InMemoryTaskStore, today: date) -> TestClient:
    """Test client backed by the in-memory store, without running the app lifespan."""
    return TestClient(app, raise_server_exceptions=False)
