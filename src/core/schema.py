"""SQLite schema for the task store (code-first approach)."""

import logging
from enum import StrEnum

import aiosqlite

from src.core.config import Constants
from src.domain.task import TaskCategory, TaskPriority


logger = logging.getLogger(__name__)


def _sql_enum(values: type[StrEnum]) -> str:
    return ", ".join(f"'{member.value}'" for member in values)


# Central mapping of all tables in the schema
TABLE_SCHEMAS: dict[str, str] = {
    "tasks": f"""
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL CHECK (length(name) BETWEEN {Constants.TASK_NAME_MIN_LENGTH}
                AND {Constants.TASK_NAME_MAX_LENGTH}),
            description TEXT NOT NULL DEFAULT '{Constants.NIL_DESCRIPTION}'
                CHECK (length(description) <= {Constants.TASK_DESCRIPTION_MAX_LENGTH}),
            status INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            priority TEXT NOT NULL CHECK (priority IN ({_sql_enum(TaskPriority)})),
            category TEXT NOT NULL CHECK (category IN ({_sql_enum(TaskCategory)})),
            due_date TEXT NOT NULL,
            is_overdue INTEGER NOT NULL DEFAULT 0,
            version INTEGER NOT NULL DEFAULT 1
        )
    """,
}

INDEXES: list[str] = [
    # Serves the overdue scanner's predicate
    "CREATE INDEX IF NOT EXISTS idx_tasks_overdue_scan ON tasks (status, is_overdue, due_date)",
]


async def init_db(*, conn: aiosqlite.Connection) -> None:
    """Create all tables and indexes if they do not exist yet."""
    for table_name, ddl in TABLE_SCHEMAS.items():
        await conn.execute(ddl)
        logger.info("Ensured table exists", extra={"table": table_name})

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
