"""Tests for the task list read-through cache."""

import asyncio

import pytest

from src.core.cache_client import TaskListCache
from src.domain.task import Task
from tests.unit.mocks import task_fields


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(fake_clock: FakeClock) -> TaskListCache:
    return TaskListCache(sliding_expiration_seconds=60, time_func=fake_clock)


def make_loader(tasks: list[Task]):
    calls = {"count": 0}

    async def loader() -> list[Task]:
        calls["count"] += 1
        return list(tasks)

    return loader, calls


@pytest.mark.unit
async def test_miss_then_hit(cache: TaskListCache) -> None:
    """Test that the first read loads and the second is served from cache."""
    tasks = [Task(id=1, **task_fields())]
    loader, calls = make_loader(tasks)

    first = await cache.get_or_load(loader)
    second = await cache.get_or_load(loader)

    assert first == tasks
    assert second == tasks
    assert calls["count"] == 1

    status = cache.get_health_status()
    assert status["hits"] == 1
    assert status["misses"] == 1
    assert status["cached"] is True
    assert status["key"] == "TodoTasks"


@pytest.mark.unit
async def test_invalidate_forces_reload(cache: TaskListCache) -> None:
    """Test that the read after an invalidation goes to the loader."""
    loader, calls = make_loader([])

    await cache.get_or_load(loader)
    cache.invalidate()
    await cache.get_or_load(loader)

    assert calls["count"] == 2
    assert cache.get_health_status()["invalidations"] == 1


@pytest.mark.unit
async def test_empty_list_is_cached(cache: TaskListCache) -> None:
    """Test that an empty result is a cache entry, not a miss."""
    loader, calls = make_loader([])

    assert await cache.get_or_load(loader) == []
    assert await cache.get_or_load(loader) == []
    assert calls["count"] == 1


@pytest.mark.unit
async def test_entry_expires_after_inactivity(cache: TaskListCache, fake_clock: FakeClock) -> None:
    """Test that an entry not read for the sliding window is dropped."""
    loader, calls = make_loader([])

    await cache.get_or_load(loader)
    fake_clock.now += 60
    await cache.get_or_load(loader)

    assert calls["count"] == 2


@pytest.mark.unit
async def test_hits_slide_the_expiry(cache: TaskListCache, fake_clock: FakeClock) -> None:
    """Test that each hit restarts the sliding window."""
    loader, calls = make_loader([])

    await cache.get_or_load(loader)
    for _ in range(3):
        fake_clock.now += 45
        await cache.get_or_load(loader)

    assert calls["count"] == 1


@pytest.mark.unit
async def test_load_racing_an_invalidation_is_not_stored(cache: TaskListCache) -> None:
    """Test that a load started before an invalidation does not repopulate the cache."""
    stale = [Task(id=1, **task_fields(name="Stale"))]
    fresh = [Task(id=1, **task_fields(name="Fresh"))]
    release = asyncio.Event()

    async def slow_loader() -> list[Task]:
        await release.wait()
        return stale

    pending = asyncio.create_task(cache.get_or_load(slow_loader))
    await asyncio.sleep(0)
    cache.invalidate()
    release.set()

    assert await pending == stale
    assert cache.get_health_status()["cached"] is False

    fresh_loader, calls = make_loader(fresh)
    assert await cache.get_or_load(fresh_loader) == fresh
    assert calls["count"] == 1


@pytest.mark.unit
async def test_returned_list_is_a_copy(cache: TaskListCache) -> None:
    """Test that mutating a returned list does not alter the cached entry."""
    loader, _ = make_loader([Task(id=1, **task_fields())])

    result = await cache.get_or_load(loader)
    result.clear()

    assert len(await cache.get_or_load(loader)) == 1


@pytest.mark.unit
async def test_mutating_a_returned_task_does_not_alter_the_cache(cache: TaskListCache) -> None:
    """Test that tasks handed out by the cache are copies of the cached ones."""
    loader, _ = make_loader([Task(id=1, **task_fields(name="Original"))])

    first = await cache.get_or_load(loader)
    first[0].name = "Changed by caller"
    first[0].is_overdue = True
    second = await cache.get_or_load(loader)

    assert second[0].name == "Original"
    assert second[0].is_overdue is False
    assert cache.get_health_status()["hits"] == 1
