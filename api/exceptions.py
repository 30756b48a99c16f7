"""Exception classes owned by the HTTP layer.

Core errors (studio.errors) are mapped to HTTP status codes by
api.error_handlers; the classes here cover failures that only exist at the
HTTP boundary. Each includes:
- message: Human-readable error message
- error_code: Machine-readable error code (e.g., "AUTHENTICATION_FAILED")
- details: Optional dictionary with additional context
"""

from typing import Any, Optional


class StudioApiException(Exception):
    """Base exception for HTTP-layer errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        details: Optional dictionary with additional error context
        status_code: HTTP status code (set by subclasses)
    """

    status_code: int = 500
    default_error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class AuthenticationError(StudioApiException):
    """Authentication failed (HTTP 401).

    Use when the bearer token is missing.
    """

    status_code = 401
    default_error_code = "AUTHENTICATION_FAILED"

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)
