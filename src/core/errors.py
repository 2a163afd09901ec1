"""Error taxonomy and translation of domain errors into API error responses."""

import logging
import sqlite3
from enum import Enum
from http import HTTPStatus
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.core.config import settings
from src.core.db_client import ConcurrencyConflictError, DatabaseError


if TYPE_CHECKING:
    from src.models.service_models import Failure


logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Kinds of errors an operation can end with, in translation precedence order."""

    NOT_FOUND = "not_found"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    MALFORMED_DATE = "malformed_date"
    NULL_ARGUMENT = "null_argument"
    INVALID_ARGUMENT = "invalid_argument"
    NULL_REFERENCE = "null_reference"
    CONCURRENCY_CONFLICT = "concurrency_conflict"
    WRITE_FAILURE = "write_failure"
    UNIMPLEMENTED = "unimplemented"
    UNCLASSIFIED = "unclassified"


class ResourceNotFoundError(Exception):
    """Raised when a requested resource does not exist."""


class BusinessRuleViolationError(Exception):
    """Raised when input is well-formed but violates a business rule."""


class MalformedDateError(ValueError):
    """Raised when a date value cannot be parsed."""


class NullArgumentError(ValueError):
    """Raised when a required argument is missing."""


class ApiErrorResponse(BaseModel):
    """Error body returned to API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_code: int
    title: str
    error_message: str


_ERROR_DEFINITIONS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.NOT_FOUND: (404, "Resource Not Found"),
    ErrorKind.BUSINESS_RULE_VIOLATION: (422, "Business Rule Violation Error"),
    ErrorKind.MALFORMED_DATE: (400, "Invalid Date Format"),
    ErrorKind.NULL_ARGUMENT: (400, "Null Argument Error"),
    ErrorKind.INVALID_ARGUMENT: (400, "Invalid Argument Error"),
    ErrorKind.NULL_REFERENCE: (400, "Null Reference Error"),
    ErrorKind.CONCURRENCY_CONFLICT: (409, "Database Concurrency Error"),
    ErrorKind.WRITE_FAILURE: (500, "Database Update Error"),
    ErrorKind.UNIMPLEMENTED: (501, "Not Implemented"),
    ErrorKind.UNCLASSIFIED: (500, "Internal Server Error"),
}

# Messages sent instead of raw internal text unless expose_internal_errors is set
_GENERIC_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CONCURRENCY_CONFLICT: "The todo task was changed by another operation. Reload it and try again.",
    ErrorKind.WRITE_FAILURE: "The todo task could not be saved. Please try again later.",
    ErrorKind.UNCLASSIFIED: "An unexpected error occurred. Please try again later.",
}

# Routing statuses that have a matching error kind
_HTTP_STATUS_KINDS: dict[int, ErrorKind] = {
    404: ErrorKind.NOT_FOUND,
    501: ErrorKind.UNIMPLEMENTED,
}

# Ordered handler chain: the first matching entry wins
_EXCEPTION_HANDLERS: list[tuple[tuple[type[BaseException], ...], ErrorKind]] = [
    ((ResourceNotFoundError,), ErrorKind.NOT_FOUND),
    ((BusinessRuleViolationError,), ErrorKind.BUSINESS_RULE_VIOLATION),
    ((MalformedDateError,), ErrorKind.MALFORMED_DATE),
    ((NullArgumentError,), ErrorKind.NULL_ARGUMENT),
    ((ValueError, TypeError), ErrorKind.INVALID_ARGUMENT),
    ((AttributeError,), ErrorKind.NULL_REFERENCE),
    ((ConcurrencyConflictError,), ErrorKind.CONCURRENCY_CONFLICT),
    ((DatabaseError, sqlite3.Error), ErrorKind.WRITE_FAILURE),
    ((NotImplementedError,), ErrorKind.UNIMPLEMENTED),
]


def classify_exception(exception: BaseException) -> ErrorKind:
    """Return the error kind of the first handler matching the exception type."""
    for exception_types, kind in _EXCEPTION_HANDLERS:
        if isinstance(exception, exception_types):
            return kind
    return ErrorKind.UNCLASSIFIED


def translate(kind: ErrorKind, message: str) -> ApiErrorResponse:
    """Build the client-facing error response for an error kind.

    Args:
        kind: Error kind produced by a service operation or by classification
        message: Message describing the failure

    Returns:
        ApiErrorResponse with status code, title and message
    """
    status_code, title = _ERROR_DEFINITIONS[kind]
    if kind in _GENERIC_MESSAGES and not settings.expose_internal_errors:
        message = _GENERIC_MESSAGES[kind]
    return ApiErrorResponse(status_code=status_code, title=title, error_message=message)


def translate_failure(failure: "Failure") -> ApiErrorResponse:
    """Build the client-facing error response for a service failure.

    Internal detail is used as the message only when internal errors are
    exposed; otherwise the kind's generic message or the failure message is sent.
    """
    message = failure.detail if settings.expose_internal_errors and failure.detail else failure.message
    return translate(failure.kind, message)


def translate_http_error(status_code: int, detail: str | None) -> ApiErrorResponse:
    """Build the error response for an HTTP error raised by routing itself.

    Covers unknown paths and unsupported methods. Statuses owned by an error
    kind reuse that kind's title; any other status uses its standard phrase.
    """
    kind = _HTTP_STATUS_KINDS.get(status_code)
    if kind is not None:
        return translate(kind, detail or _ERROR_DEFINITIONS[kind][1])

    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "HTTP Error"
    return ApiErrorResponse(status_code=status_code, title=title, error_message=detail or title)


def translate_exception(exception: BaseException) -> ApiErrorResponse:
    """Classify an escaped exception and build its error response."""
    kind = classify_exception(exception)
    logger.error(
        "Unhandled exception translated to error response",
        exc_info=exception,
        extra={"error_kind": kind.value, "exception_type": type(exception).__name__},
    )
    return translate(kind, str(exception) or _ERROR_DEFINITIONS[kind][1])
