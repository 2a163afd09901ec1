"""Task domain models, enums and the overdue rule."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.config import Constants


class TaskPriority(StrEnum):
    """Task priority, serialized by name."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TaskCategory(StrEnum):
    """Task category, serialized by name."""

    WORK = "Work"
    PERSONAL = "Personal"
    FAMILY = "Family"
    HEALTH = "Health"
    HOBBIES = "Hobbies"
    CHORES = "Chores"
    SHOPPING = "Shopping"
    LEARNING = "Learning"
    OTHER = "Other"


class Task(BaseModel):
    """Stored task record.

    Field names are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = Field(default=None, description="Unique task ID assigned by the store, None until saved")
    name: str = Field(..., description="Task name")
    description: str = Field(default=Constants.NIL_DESCRIPTION, description="Task description")
    status: bool = Field(default=False, description="True when the task is done")
    created_at: date = Field(..., description="Creation date, never changes")
    updated_at: date = Field(..., description="Date of the last direct update")
    priority: TaskPriority = Field(..., description="Task priority")
    category: TaskCategory = Field(..., description="Task category")
    due_date: date = Field(..., description="Date the task is due")
    is_overdue: bool = Field(default=False, description="Derived: pending and past its due date")
    version: int = Field(default=1, exclude=True, description="Optimistic concurrency token")


def compute_is_overdue(task: Task, today: date) -> bool:
    """Return the overdue flag a task should carry on ``today``.

    A task is overdue when it is still pending and its due date has passed.
    Comparison is by calendar date only.
    """
    return not task.status and task.due_date < today


def due_date_violation(due_date: date, today: date) -> str | None:
    """Return the rule message if ``due_date`` is not today or later."""
    if due_date < today:
        return "The date must be in future."
    return None
