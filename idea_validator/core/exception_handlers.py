"""Global exception handlers for consistent error responses.

Every AppError subclass maps to one HTTP status; anything else becomes a
generic 500 without implementation details. All responses carry the
request_id for log correlation.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idea_validator.core.errors import (
    AppError,
    AuthenticationAppError,
    ConfigurationAppError,
    LLMAppError,
    NotFoundAppError,
    PermissionAppError,
    QuotaExceededAppError,
    StoreAppError,
    ValidationAppError,
)
from idea_validator.core.logging import get_request_id

logger = logging.getLogger(__name__)

# First match wins, so subclasses must precede their bases
ERROR_STATUS_CODES: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (AuthenticationAppError, 403),
    (PermissionAppError, 403),
    (NotFoundAppError, 404),
    (QuotaExceededAppError, 429),
    (LLMAppError, 502),
    (StoreAppError, 503),
    (ConfigurationAppError, 500),
)


def status_code_for(exc: AppError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Response body::

        {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

    ``details`` is included only when the error carries any.
    """
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message; no stack traces reach
    the client.
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


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
