"""In-memory read-through cache for the task list with sliding expiration."""

import logging
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any

from src.core.config import constants, settings
from src.domain.task import Task


logger = logging.getLogger(__name__)


class TaskListCache:
    """Thread-safe single-entry cache holding the full task list.

    The entry's time-to-live restarts on every hit. ``invalidate`` bumps a
    generation counter so a load that began before the invalidation cannot
    store its result afterwards.
    """

    def __init__(
        self,
        *,
        sliding_expiration_seconds: float,
        key: str = constants.TASK_LIST_CACHE_KEY,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache."""
        self._key = key
        self._sliding_expiration = sliding_expiration_seconds
        self._time = time_func
        self._lock = threading.Lock()

        self._entry: tuple[Task, ...] | None = None
        self._expires_at = 0.0
        self._generation = 0

        # Health tracking
        self._hits = 0
        self._misses = 0
        self._invalidations = 0

    def get_health_status(self) -> dict[str, Any]:
        """Get cache health status.

        Returns:
            Dict with entry presence and hit/miss/invalidation counters
        """
        with self._lock:
            return {
                "key": self._key,
                "cached": self._live_entry() is not None,
                "hits": self._hits,
                "misses": self._misses,
                "invalidations": self._invalidations,
            }

    def _live_entry(self) -> tuple[Task, ...] | None:
        """Return the entry if it has not expired. Caller holds the lock."""
        if self._entry is not None and self._time() >= self._expires_at:
            self._entry = None
        return self._entry

    async def get_or_load(self, loader: Callable[[], Awaitable[list[Task]]]) -> list[Task]:
        """Return the cached task list, loading it on a miss.

        Args:
            loader: Async callable returning the full task list from the store

        Returns:
            Copies of the cached tasks; callers may mutate them freely
        """
        with self._lock:
            entry = self._live_entry()
            if entry is not None:
                self._expires_at = self._time() + self._sliding_expiration
                self._hits += 1
                logger.info("Cache hit. Returning cached todo tasks.", extra={"key": self._key})
                return [task.model_copy() for task in entry]
            self._misses += 1
            generation = self._generation

        logger.info("Cache miss. Fetching from database...", extra={"key": self._key})
        tasks = await loader()

        with self._lock:
            if generation == self._generation:
                self._entry = tuple(tasks)
                self._expires_at = self._time() + self._sliding_expiration
                logger.debug("Cached key: %s (sliding: %ss)", self._key, self._sliding_expiration)
            else:
                logger.debug("Discarded stale load for key: %s", self._key)
        return [task.model_copy() for task in tasks]

    def invalidate(self) -> None:
        """Remove the cached entry; the next read is guaranteed to miss."""
        with self._lock:
            self._entry = None
            self._generation += 1
            self._invalidations += 1
        logger.debug("Invalidated cache key: %s", self._key)


# Global cache instance
task_cache = TaskListCache(sliding_expiration_seconds=settings.cache_sliding_expiration_seconds)
