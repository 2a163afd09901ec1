"""Pydantic models for service layer return types.

Service operations return one of ``Success``, ``NoContent`` or ``Failure``
instead of raising for expected outcomes. The HTTP boundary converts these
values into responses.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from src.core.errors import ErrorKind


T = TypeVar("T")


class Success(BaseModel, Generic[T]):
    """Operation succeeded with a value."""

    value: T


class NoContent(BaseModel):
    """Operation succeeded and there is nothing to return."""


class Failure(BaseModel):
    """Operation failed with a classified error.

    ``message`` may be shown to clients. ``detail`` holds internal context and
    is only logged.
    """

    kind: ErrorKind
    message: str
    detail: str | None = Field(default=None, repr=False)


class ScanReport(BaseModel):
    """Result of one overdue reconciliation pass."""

    today: str
    matched: int
    flagged: int
    skipped_ids: list[int] = Field(default_factory=list)
