"""taskboard - Todo task API with derived overdue tracking."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.cache_client import task_cache
from src.core.config import constants
from src.core.db_client import init_db
from src.core.errors import ErrorKind, translate, translate_exception, translate_http_error
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.scheduler import start_scheduler, stop_scheduler
from src.core.scheduler_tracker import job_tracker
from src.interface.tasks_router import router as tasks_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so startup logs are captured
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    start_scheduler()
    yield
    # Shutdown
    stop_scheduler()


app = FastAPI(
    title="taskboard",
    description="Todo task API with derived overdue tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(tasks_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Translate request shape errors.

    A non-integer path id is an invalid argument; a body that is not a JSON
    object is a business rule violation.
    """
    errors = exc.errors()
    if any(err["loc"] and err["loc"][0] == "path" for err in errors):
        kind, message = ErrorKind.INVALID_ARGUMENT, "Id must be a valid integer."
    else:
        kind, message = ErrorKind.BUSINESS_RULE_VIOLATION, "The todo task entered is not valid."

    logger.warning(
        "request_validation_failed",
        extra={"path": request.url.path, "error_kind": kind.value, "errors": str(errors)},
    )
    error = translate(kind, message)
    return JSONResponse(content=error.model_dump(by_alias=True), status_code=error.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Translate routing errors (unknown path, unsupported method) into error bodies."""
    logger.warning(
        "http_error",
        extra={"path": request.url.path, "method": request.method, "status_code": exc.status_code},
    )
    error = translate_http_error(exc.status_code, exc.detail)
    return JSONResponse(
        content=error.model_dump(by_alias=True),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Translate any exception that escaped the service layer."""
    error = translate_exception(exc)
    return JSONResponse(content=error.model_dump(by_alias=True), status_code=error.status_code)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy", "cache": task_cache.get_health_status()}, status_code=200)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with the overdue scan job status."""
    job_status = job_tracker.get_job_status(constants.OVERDUE_SCAN_JOB_ID)

    overall_status = "degraded" if job_status["consecutive_failures"] > 0 else "healthy"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": {constants.OVERDUE_SCAN_JOB_ID: job_status},
        },
        status_code=200 if overall_status == "healthy" else 503,
    )
