from src.services import (
    overdue_scanner,
    task_service,
)


__all__ = [
    "overdue_scanner",
    "task_service",
]
