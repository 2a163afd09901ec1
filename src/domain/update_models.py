"""Update models for task operations."""

from pydantic import Field

from src.domain.create_models import TaskCreate


class TaskUpdate(TaskCreate):
    """Full replacement payload for an existing task.

    The body id must match the id in the request path.
    """

    id: int | None = Field(default=None, description="Task ID, must match the path ID")
    status: bool = Field(default=False, description="True when the task is done")
