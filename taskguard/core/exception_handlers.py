"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses map to HTTP status codes (400, 403, 404, 409, 503)
- Unexpected Exception becomes a generic 500 plus an audit entry
- All responses include request_id for correlation
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from taskguard.adapters.audit.base import AuditLevel
from taskguard.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    NotFoundAppError,
    StorageAppError,
)
from taskguard.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (AuthenticationAppError, 403),
    (NotFoundAppError, 404),
    (ConflictAppError, 409),
    (StorageAppError, 503),
)


def status_for(exc: AppError) -> int:
    """Return the HTTP status for a domain error (400 when unmapped)."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as ``{"error": {code, message, request_id, details?}}``."""

    status_code = status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors.

    Logs the failure, records an ``unhandled_exception`` audit event when a
    container is available, and returns a generic message without internals.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    container = getattr(request.app.state, "container", None)
    if container is not None:
        container.audit.append(
            AuditLevel.ERROR,
            "unhandled_exception",
            {
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            },
        )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""

    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
