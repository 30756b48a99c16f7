"""Global exception handlers for FastAPI.

Provides consistent JSON error response format across all endpoints:

    {"error": {"code": ..., "message": ..., "details": ...}}

Core errors map to HTTP status by type. Internal server errors (500s) are
logged but not exposed to clients.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.exceptions import StudioApiException
from studio.errors import (
    ImmutabilityViolationError,
    InvalidStateError,
    LoadError,
    NotFoundError,
    StudioError,
    UnauthorizedError,
    WriteError,
)

logger = logging.getLogger(__name__)

# Most specific class wins (looked up along the exception's MRO)
STATUS_BY_ERROR: dict[type, int] = {
    UnauthorizedError: 403,
    InvalidStateError: 409,
    NotFoundError: 404,
    ImmutabilityViolationError: 409,
    WriteError: 503,
    LoadError: 503,
    StudioError: 500,
}

# Error codes whose status differs from their class
STATUS_BY_CODE: dict[str, int] = {
    "AUTHENTICATION_FAILED": 401,
}


def status_for(exc: StudioError) -> int:
    """HTTP status code for a core error."""
    if exc.error_code in STATUS_BY_CODE:
        return STATUS_BY_CODE[exc.error_code]
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def create_error_response(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create standardized error response structure.

    Args:
        code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional context

    Returns:
        Error response dictionary
    """
    error = {
        "code": code,
        "message": message,
    }
    if details:
        error["details"] = details
    return {"error": error}


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    """Handle core errors raised by the review pipeline."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Core error: %s (code=%s, status=%d, path=%s)",
        exc.message,
        exc.error_code,
        status_code,
        request.url.path,
        extra={"details": exc.details},
    )

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(
            code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None,
        ),
        headers=headers,
    )


async def api_exception_handler(request: Request, exc: StudioApiException) -> JSONResponse:
    """Handle StudioApiException and subclasses."""
    logger.warning(
        "API error: %s (code=%s, status=%d, path=%s)",
        exc.message,
        exc.error_code,
        exc.status_code,
        request.url.path,
        extra={"details": exc.details},
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None,
        ),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Converts FastAPI's validation errors to our standard format.
    """
    errors = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error.get("loc", []))
        errors.append(
            {
                "field": loc,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )

    logger.info(
        "Validation error: %d field errors (path=%s)",
        len(errors),
        request.url.path,
    )

    return JSONResponse(
        status_code=400,
        content=create_error_response(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"errors": errors},
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle Starlette/FastAPI HTTPExceptions (e.g. unknown routes)."""
    status_code_map = {
        400: "BAD_REQUEST",
        401: "AUTHENTICATION_FAILED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        500: "INTERNAL_ERROR",
    }

    error_code = status_code_map.get(exc.status_code, "ERROR")
    message = str(exc.detail) if exc.detail else "An error occurred"

    logger.info(
        "HTTP error %d: %s (path=%s)",
        exc.status_code,
        message,
        request.url.path,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(code=error_code, message=message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Logs the full traceback but returns a generic message to clients.
    """
    logger.error(
        "Unhandled exception: %s (path=%s)\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    return JSONResponse(
        status_code=500,
        content=create_error_response(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(StudioError, studio_error_handler)
    app.add_exception_handler(StudioApiException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
