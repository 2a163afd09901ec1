"""Domain models and DTOs."""

from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskCategory, TaskPriority, compute_is_overdue, due_date_violation
from src.domain.update_models import TaskUpdate


__all__ = [
    "Task",
    "TaskCategory",
    "TaskCreate",
    "TaskPriority",
    "TaskUpdate",
    "compute_is_overdue",
    "due_date_violation",
]
