"""SQLite task store with scoped sessions and optimistic concurrency."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from src.core import schema
from src.core.config import settings
from src.domain.task import Task


logger = logging.getLogger(__name__)

# Columns a caller may write; id and version are managed by the store
WRITABLE_COLUMNS = frozenset(
    {
        "name",
        "description",
        "status",
        "created_at",
        "updated_at",
        "priority",
        "category",
        "due_date",
        "is_overdue",
    }
)

_session_connection: ContextVar[aiosqlite.Connection | None] = ContextVar("_session_connection", default=None)


class DatabaseError(Exception):
    """Raised when a store operation fails."""


class ConcurrencyConflictError(DatabaseError):
    """Raised when a versioned write finds the row changed or removed since it was read."""


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _to_db_value(value: Any) -> Any:  # noqa: ANN401
    """Convert a Python value to its SQLite column representation."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _prepare(data: dict[str, Any]) -> dict[str, Any]:
    """Validate column names and convert values for SQLite."""
    unknown = set(data) - WRITABLE_COLUMNS
    if unknown:
        msg = f"Unknown task columns: {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    return {key: _to_db_value(value) for key, value in data.items()}


def _row_to_task(row: aiosqlite.Row) -> Task:
    return Task.model_validate(dict(row))


async def _open_connection() -> aiosqlite.Connection:
    path = get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(str(path))
    conn.row_factory = aiosqlite.Row
    await conn.execute("PRAGMA journal_mode = WAL")
    await conn.execute("PRAGMA busy_timeout = 5000")
    return conn


@asynccontextmanager
async def session() -> AsyncIterator[aiosqlite.Connection]:
    """Open a short-lived store session.

    Store calls made inside the block share one connection and one
    transaction, committed when the block exits cleanly and rolled back
    otherwise. Nested sessions reuse the outer connection.
    """
    existing = _session_connection.get()
    if existing is not None:
        yield existing
        return

    conn = await _open_connection()
    token = _session_connection.set(conn)
    try:
        yield conn
        await conn.commit()
    except BaseException:
        await conn.rollback()
        raise
    finally:
        _session_connection.reset(token)
        await conn.close()


async def init_db() -> None:
    """Initialize the database schema."""
    try:
        async with session() as conn:
            await schema.init_db(conn=conn)
        logger.info("Database initialized", extra={"db_path": str(get_db_path())})
    except aiosqlite.Error as e:
        logger.error("init_db_failed", extra={"db_path": str(get_db_path()), "error": str(e)})
        msg = f"Failed to initialize database: {e}"
        raise DatabaseError(msg) from e


async def fetch_task(task_id: int) -> Task | None:
    """Fetch a single task by ID, or None if it does not exist."""
    try:
        async with session() as conn:
            cursor = await conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = await cursor.fetchone()
    except aiosqlite.Error as e:
        logger.error("fetch_task_failed", extra={"task_id": task_id, "error": str(e)})
        msg = f"Failed to fetch task {task_id}: {e}"
        raise DatabaseError(msg) from e

    if row is None:
        return None
    return _row_to_task(row)


async def fetch_tasks() -> list[Task]:
    """Fetch every task ordered by ID."""
    try:
        async with session() as conn:
            cursor = await conn.execute("SELECT * FROM tasks ORDER BY id ASC")
            rows = await cursor.fetchall()
    except aiosqlite.Error as e:
        logger.error("fetch_tasks_failed", extra={"error": str(e)})
        msg = f"Failed to list tasks: {e}"
        raise DatabaseError(msg) from e

    logger.info("Listed tasks", extra={"count": len(rows)})
    return [_row_to_task(row) for row in rows]


async def fetch_overdue_candidates(*, today: date) -> list[Task]:
    """Fetch pending tasks past their due date that are not yet flagged overdue."""
    query = "SELECT * FROM tasks WHERE status = 0 AND is_overdue = 0 AND due_date < ? ORDER BY id ASC"
    try:
        async with session() as conn:
            cursor = await conn.execute(query, (today.isoformat(),))
            rows = await cursor.fetchall()
    except aiosqlite.Error as e:
        logger.error("fetch_overdue_candidates_failed", extra={"today": today.isoformat(), "error": str(e)})
        msg = f"Failed to query overdue candidates: {e}"
        raise DatabaseError(msg) from e

    return [_row_to_task(row) for row in rows]


async def insert_task(data: dict[str, Any]) -> Task:
    """Insert a new task and return it with its assigned ID."""
    values = _prepare(data)
    columns_str = ", ".join(values)
    placeholders_str = ", ".join("?" for _ in values)
    query = f"INSERT INTO tasks ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - columns are whitelisted

    try:
        async with session() as conn:
            cursor = await conn.execute(query, list(values.values()))
            task_id = cursor.lastrowid
            cursor = await conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = await cursor.fetchone()
    except aiosqlite.Error as e:
        logger.error("insert_task_failed", extra={"error": str(e)})
        msg = f"Failed to insert task: {e}"
        raise DatabaseError(msg) from e

    if row is None:
        msg = "Inserted task could not be read back"
        raise DatabaseError(msg)

    logger.info("Inserted task", extra={"task_id": task_id})
    return _row_to_task(row)


async def update_task(task_id: int, data: dict[str, Any], *, expected_version: int) -> Task:
    """Write ``data`` to a task if its version still equals ``expected_version``.

    Raises:
        ConcurrencyConflictError: If the task changed or disappeared since it was read
        DatabaseError: For other failures
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    values = _prepare(data)
    set_clause = ", ".join(f"{key} = ?" for key in values)
    query = f"UPDATE tasks SET {set_clause}, version = version + 1 WHERE id = ? AND version = ?"  # noqa: S608 - columns are whitelisted

    try:
        async with session() as conn:
            cursor = await conn.execute(query, [*values.values(), task_id, expected_version])
            if cursor.rowcount == 0:
                msg = f"Task {task_id} was modified or deleted by another operation (expected version {expected_version})"
                raise ConcurrencyConflictError(msg)
            cursor = await conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = await cursor.fetchone()
    except aiosqlite.Error as e:
        logger.error("update_task_failed", extra={"task_id": task_id, "error": str(e)})
        msg = f"Failed to update task {task_id}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Updated task", extra={"task_id": task_id, "columns": sorted(values)})
    return _row_to_task(row)


async def delete_task(task_id: int, *, expected_version: int) -> None:
    """Delete a task if its version still equals ``expected_version``.

    Raises:
        ConcurrencyConflictError: If the task changed or disappeared since it was read
        DatabaseError: For other failures
    """
    try:
        async with session() as conn:
            cursor = await conn.execute(
                "DELETE FROM tasks WHERE id = ? AND version = ?",
                (task_id, expected_version),
            )
            if cursor.rowcount == 0:
                msg = f"Task {task_id} was modified or deleted by another operation (expected version {expected_version})"
                raise ConcurrencyConflictError(msg)
    except aiosqlite.Error as e:
        logger.error("delete_task_failed", extra={"task_id": task_id, "error": str(e)})
        msg = f"Failed to delete task {task_id}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Deleted task", extra={"task_id": task_id})
