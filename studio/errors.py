"""Error taxonomy for the authorization and approval core.

All core errors inherit from StudioError and include:
- message: Human-readable error message
- error_code: Machine-readable error code (e.g., "INVALID_STATE")
- details: Optional dictionary with additional context
- retryable: Whether the caller may retry the whole operation

Capability and state errors describe facts, not transient conditions, and are
never retried. Write and load errors may be retried by the caller at the
granularity of the whole operation.
"""

from typing import Any, Optional


class StudioError(Exception):
    """Base exception for all core errors."""

    default_error_code: str = "STUDIO_ERROR"
    default_message: str = "An unexpected error occurred"
    retryable: bool = False

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging or JSON responses."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class UnauthorizedError(StudioError):
    """Capability check failed. Surfaced to the user as "no access"."""

    default_error_code = "UNAUTHORIZED"
    default_message = "You do not have access to this action"


class StaleContextError(UnauthorizedError):
    """Access context was computed before the latest identity change."""

    default_error_code = "STALE_CONTEXT"
    default_message = "Your session changed, please refresh"


class InvalidStateError(StudioError):
    """Precondition violated, e.g. acting on a stale view of a post."""

    default_error_code = "INVALID_STATE"
    default_message = "This post was already reviewed, please refresh"


class NotFoundError(StudioError):
    """Referenced profile, post, or workspace is missing."""

    default_error_code = "NOT_FOUND"
    default_message = "Resource not found"


class WriteError(StudioError):
    """Transient storage/transport failure on a mutating call."""

    default_error_code = "WRITE_ERROR"
    default_message = "The change could not be saved, please try again"
    retryable = True


class ImmutabilityViolationError(WriteError):
    """Attempt to update or delete an append-only record."""

    default_error_code = "IMMUTABLE_RECORD"
    default_message = "Append-only records cannot be modified"
    retryable = False


class LoadError(StudioError):
    """Read failure. Callers degrade to empty or cached data."""

    default_error_code = "LOAD_ERROR"
    default_message = "Some data could not be loaded"
    retryable = True


class DirectoryNotLoadedError(LoadError):
    """Capabilities requested before the membership directory finished loading."""

    default_error_code = "DIRECTORY_NOT_LOADED"
    default_message = "Account permissions are not loaded yet"
    retryable = False
