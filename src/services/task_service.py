"""Task service: CRUD orchestration, derived overdue state and list cache invalidation."""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.core import clock, db_client
from src.core.cache_client import task_cache
from src.core.config import constants
from src.core.errors import ErrorKind
from src.core.logging import log_with_context, span
from src.domain.create_models import TaskCreate
from src.domain.task import Task, compute_is_overdue, due_date_violation
from src.domain.update_models import TaskUpdate
from src.models.service_models import Failure, NoContent, Success


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

TaskResult = Success[Task] | Failure
TaskListResult = Success[list[Task]] | NoContent | Failure

_DUE_DATE_FIELDS = {"dueDate", "due_date"}
_INVALID_TASK_MESSAGE = "The todo task entered is not valid."


def _fail(
    kind: ErrorKind,
    message: str,
    *,
    detail: str | None = None,
    level: str = "warning",
    **context: Any,  # noqa: ANN401
) -> Failure:
    """Log a failure and return it as a result value."""
    log_with_context(logger, level, message, error_kind=kind.value, detail=detail, **context)
    return Failure(kind=kind, message=message, detail=detail)


def _not_found(task_id: int) -> Failure:
    return _fail(ErrorKind.NOT_FOUND, f"Todo task with id {task_id} does not exist.", task_id=task_id)


def validate_task_id(task_id: int | None) -> Failure | None:
    """Check that an ID is present and within the valid range.

    Runs before any store access.
    """
    if task_id is None:
        return _fail(ErrorKind.NULL_ARGUMENT, "Id cannot be null")
    if task_id <= 0:
        return _fail(ErrorKind.INVALID_ARGUMENT, "Id must be greater than zero", task_id=task_id)
    if task_id > constants.MAX_TASK_ID:
        return _fail(
            ErrorKind.INVALID_ARGUMENT,
            f"Id must be less than or equal to {constants.MAX_TASK_ID}",
            task_id=task_id,
        )
    return None


def _validation_failure(error: ValidationError) -> Failure:
    """Map a payload validation error to a malformed-date or business-rule failure.

    A bad due date is reported as malformed only when it is the sole problem;
    any other field error makes the whole payload a business rule violation.
    """
    errors = error.errors()
    other_errors = [
        err
        for err in errors
        if not (err["loc"] and err["loc"][0] in _DUE_DATE_FIELDS and err["type"].startswith("date"))
    ]
    if not other_errors:
        return _fail(
            ErrorKind.MALFORMED_DATE,
            "The due date must be a valid calendar date in YYYY-MM-DD format.",
        )

    reasons = "; ".join(f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in errors)
    return _fail(ErrorKind.BUSINESS_RULE_VIOLATION, f"{_INVALID_TASK_MESSAGE} {reasons}")



def _parse_payload(model: type[ModelT], payload: dict[str, Any]) -> ModelT | Failure:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        return _validation_failure(e)


def _columns(task: Task) -> dict[str, Any]:
    """Writable store columns of a task."""
    return task.model_dump(exclude={"id", "version"})


def _store_failure(error: db_client.DatabaseError, operation: str, **context: Any) -> Failure:  # noqa: ANN401
    """Log a store exception with full detail and return it as a failure."""
    if isinstance(error, db_client.ConcurrencyConflictError):
        return _fail(
            ErrorKind.CONCURRENCY_CONFLICT,
            f"A concurrency error occurred while {operation} the todo task.",
            detail=str(error),
            level="error",
            **context,
        )
    return _fail(
        ErrorKind.WRITE_FAILURE,
        f"A database error occurred while {operation} the todo task.",
        detail=str(error),
        level="error",
        **context,
    )


async def list_tasks() -> TaskListResult:
    """Return all tasks through the read-through cache.

    Returns:
        Success with the task list, NoContent when there are no tasks, or a Failure
    """
    with span("task_service.list_tasks"):
        try:
            tasks = await task_cache.get_or_load(db_client.fetch_tasks)
        except db_client.DatabaseError as e:
            return _store_failure(e, "listing")

        if not tasks:
            logger.info("No todo tasks found in the database.")
            return NoContent()

        logger.info("Returning %d todo tasks.", len(tasks))
        return Success[list[Task]](value=tasks)


async def get_task(task_id: int | None) -> TaskResult:
    """Return a single task by ID."""
    with span("task_service.get_task"):
        if failure := validate_task_id(task_id):
            return failure

        try:
            task = await db_client.fetch_task(task_id)
        except db_client.DatabaseError as e:
            return _store_failure(e, "retrieving", task_id=task_id)

        if task is None:
            return _not_found(task_id)

        logger.info("Returning todo task with id %d.", task_id)
        return Success[Task](value=task)


async def create_task(payload: dict[str, Any] | None) -> TaskResult:
    """Validate and store a new task.

    The server sets createdAt/updatedAt to today, forces status to pending and
    derives isOverdue before the write. The list cache is invalidated before
    returning.

    Args:
        payload: Raw task body as submitted by the client

    Returns:
        Success with the stored task, or a Failure
    """
    with span("task_service.create_task"):
        if payload is None:
            return _fail(ErrorKind.NULL_ARGUMENT, "Todo task cannot be null.")

        submitted = _parse_payload(TaskCreate, payload)
        if isinstance(submitted, Failure):
            return submitted

        today = clock.today()
        if violation := due_date_violation(submitted.due_date, today):
            return _fail(ErrorKind.BUSINESS_RULE_VIOLATION, f"{_INVALID_TASK_MESSAGE} dueDate: {violation}")

        draft = Task(
            name=submitted.name,
            description=submitted.description if submitted.description is not None else constants.NIL_DESCRIPTION,
            status=False,
            created_at=today,
            updated_at=today,
            priority=submitted.priority,
            category=submitted.category,
            due_date=submitted.due_date,
        )
        draft.is_overdue = compute_is_overdue(draft, today)

        try:
            stored = await db_client.insert_task(_columns(draft))
        except db_client.DatabaseError as e:
            return _store_failure(e, "creating")

        task_cache.invalidate()
        logger.info("Todo task with id %s created successfully.", stored.id, extra={"task_id": stored.id})
        return Success[Task](value=stored)


async def update_task(task_id: int | None, payload: dict[str, Any] | None) -> TaskResult:
    """Replace every client-editable field of an existing task.

    id and createdAt are preserved, updatedAt is refreshed and isOverdue is
    derived again. The due-date rule applies only when the due date changes,
    so a task already past its due date can still be completed.
    """
    with span("task_service.update_task"):
        if task_id is None or payload is None:
            return _fail(ErrorKind.NULL_ARGUMENT, "Todo task or ID cannot be null.")

        if payload.get("id") != task_id:
            return _fail(
                ErrorKind.INVALID_ARGUMENT,
                "Todo task ID does not match the provided ID.",
                task_id=task_id,
                body_id=payload.get("id"),
            )

        if failure := validate_task_id(task_id):
            return failure

        submitted = _parse_payload(TaskUpdate, payload)
        if isinstance(submitted, Failure):
            return submitted

        try:
            existing = await db_client.fetch_task(task_id)
        except db_client.DatabaseError as e:
            return _store_failure(e, "updating", task_id=task_id)

        if existing is None:
            return _not_found(task_id)

        today = clock.today()
        if submitted.due_date != existing.due_date and (violation := due_date_violation(submitted.due_date, today)):
            return _fail(ErrorKind.BUSINESS_RULE_VIOLATION, f"{_INVALID_TASK_MESSAGE} dueDate: {violation}")

        candidate = existing.model_copy(
            update={
                "name": submitted.name,
                "description": submitted.description
                if submitted.description is not None
                else constants.NIL_DESCRIPTION,
                "status": submitted.status,
                "priority": submitted.priority,
                "category": submitted.category,
                "due_date": submitted.due_date,
                "updated_at": today,
            }
        )
        candidate.is_overdue = compute_is_overdue(candidate, today)

        try:
            stored = await db_client.update_task(task_id, _columns(candidate), expected_version=existing.version)
        except db_client.DatabaseError as e:
            return _store_failure(e, "updating", task_id=task_id)

        task_cache.invalidate()
        logger.info("Todo task with id %d updated successfully.", task_id, extra={"task_id": task_id})
        return Success[Task](value=stored)


async def delete_task(task_id: int | None) -> TaskResult:
    """Remove a task and return it as it was before removal."""
    with span("task_service.delete_task"):
        if failure := validate_task_id(task_id):
            return failure

        try:
            existing = await db_client.fetch_task(task_id)
            if existing is None:
                return _not_found(task_id)
            await db_client.delete_task(task_id, expected_version=existing.version)
        except db_client.DatabaseError as e:
            return _store_failure(e, "deleting", task_id=task_id)

        task_cache.invalidate()
        logger.info("Todo task with id %d deleted successfully.", task_id, extra={"task_id": task_id})
        return Success[Task](value=existing)
