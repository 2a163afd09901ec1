"""HTTP surface for todo tasks."""

from typing import Any

from fastapi import APIRouter, Body, Response, status
from fastapi.responses import JSONResponse

from src.core.errors import translate_failure
from src.domain.task import Task
from src.models.service_models import Failure, NoContent
from src.services import task_service


router = APIRouter(prefix="/tasks", tags=["tasks"])


def _error_response(failure: Failure) -> JSONResponse:
    error = translate_failure(failure)
    return JSONResponse(content=error.model_dump(by_alias=True), status_code=error.status_code)


def _task_content(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json", by_alias=True)


@router.get("")
async def list_tasks() -> Response:
    """Return all tasks, or 204 when there are none."""
    result = await task_service.list_tasks()
    if isinstance(result, Failure):
        return _error_response(result)
    if isinstance(result, NoContent):
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(content=[_task_content(task) for task in result.value], status_code=status.HTTP_200_OK)


@router.get("/{task_id}", name="get_task")
async def get_task(task_id: int) -> Response:
    """Return a single task."""
    result = await task_service.get_task(task_id)
    if isinstance(result, Failure):
        return _error_response(result)
    return JSONResponse(content=_task_content(result.value), status_code=status.HTTP_200_OK)


@router.post("")
async def create_task(payload: dict[str, Any] | None = Body(default=None)) -> Response:  # noqa: B008
    """Create a task and point the Location header at it."""
    result = await task_service.create_task(payload)
    if isinstance(result, Failure):
        return _error_response(result)

    task = result.value
    return JSONResponse(
        content=_task_content(task),
        status_code=status.HTTP_201_CREATED,
        headers={"Location": f"{router.prefix}/{task.id}"},
    )


@router.put("/{task_id}")
async def update_task(task_id: int, payload: dict[str, Any] | None = Body(default=None)) -> Response:  # noqa: B008
    """Replace a task's editable fields."""
    result = await task_service.update_task(task_id, payload)
    if isinstance(result, Failure):
        return _error_response(result)
    return JSONResponse(content=_task_content(result.value), status_code=status.HTTP_200_OK)


@router.delete("/{task_id}")
async def delete_task(task_id: int) -> Response:
    """Delete a task and return it as it was before removal."""
    result = await task_service.delete_task(task_id)
    if isinstance(result, Failure):
        return _error_response(result)
    return JSONResponse(content=_task_content(result.value), status_code=status.HTTP_200_OK)
