"""Pydantic models for task payloads submitted by clients."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.config import Constants
from src.domain.task import TaskCategory, TaskPriority


class TaskCreate(BaseModel):
    """Payload for creating a task.

    Server-managed fields (id, status, createdAt, updatedAt, isOverdue) are
    ignored if a client sends them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(
        ...,
        min_length=Constants.TASK_NAME_MIN_LENGTH,
        max_length=Constants.TASK_NAME_MAX_LENGTH,
        description="Task name",
    )
    description: str | None = Field(
        default=None, max_length=Constants.TASK_DESCRIPTION_MAX_LENGTH, description="Task description"
    )
    priority: TaskPriority = Field(..., description="Task priority")
    category: TaskCategory = Field(..., description="Task category")
    due_date: date = Field(..., description="Date the task is due")

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            msg = "The name should be between 2 to 100 character long."
            raise ValueError(msg)
        return v
