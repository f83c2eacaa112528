"""
Error taxonomy and the HTTP exception handlers that render it.

Every failure leaves the API in the same envelope:
    {"success": false, "message": <str>, "error": <details>}
The status code is looked up from ERROR_STATUS_CODES by error kind.
"""
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_registry.core.logging import audit_log


class ErrorKind(str, Enum):
    """Kinds of failure a request can end in."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base class for errors raised by services and repositories."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]


class ValidationFailedError(AppError):
    kind = ErrorKind.VALIDATION


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


def error_envelope(message: str, error: Any) -> dict:
    """Build the failure envelope."""
    return {"success": False, "message": message, "error": error}


def format_validation_errors(errors: list[dict]) -> list[dict[str, str]]:
    """
    Flatten pydantic errors into one {path, message} entry per violation.
    The leading "body" location segment is dropped.
    """
    sources = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        message = err.get("msg", "Invalid value")
        # Custom validators surface as "Value error, <message>"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        sources.append({"path": ".".join(loc), "message": message})
    return sources


def _respond(kind: ErrorKind, message: str, error: Any) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[kind],
        content=jsonable_encoder(error_envelope(message, error)),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    audit_log.log_request_failed(
        request.method, request.url.path, exc.kind.value, exc.message
    )
    error = {"kind": exc.kind.value}
    if exc.details is not None:
        error["details"] = exc.details
    return _respond(exc.kind, exc.message, error)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    sources = format_validation_errors(exc.errors())
    audit_log.log_request_failed(
        request.method,
        request.url.path,
        ErrorKind.VALIDATION.value,
        f"{len(sources)} validation error(s)"
    )
    return _respond(ErrorKind.VALIDATION, "Validation Error", sources)


async def duplicate_key_handler(
    request: Request, exc: DuplicateKeyError
) -> JSONResponse:
    # Unique index violation that slipped past the service pre-check
    key_value = (exc.details or {}).get("keyValue") or {}
    audit_log.log_request_failed(
        request.method, request.url.path, ErrorKind.CONFLICT.value, str(exc)
    )
    fields = ", ".join(key_value) or "value"
    return _respond(
        ErrorKind.CONFLICT,
        f"Duplicate {fields}",
        {"kind": ErrorKind.CONFLICT.value, "details": key_value},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_envelope(
                "API Not Found",
                {"path": request.url.path, "message": "API Not Found"},
            ),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail), {"status": exc.status_code}),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    audit_log.log_request_failed(
        request.method, request.url.path, ErrorKind.INTERNAL.value, repr(exc)
    )
    return _respond(
        ErrorKind.INTERNAL,
        "Something went wrong",
        {"kind": ErrorKind.INTERNAL.value},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
