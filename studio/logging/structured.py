"""Structured logging with structlog.

Provides:
- JSON-formatted log output for production
- Context processors for request_id, account_id, workspace_id
- Factory function for creating loggers
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional
from uuid import UUID

import structlog
from structlog.types import EventDict, WrappedLogger

from studio.config import LOG_FORMAT, LOG_LEVEL


# Request-scoped context; a ContextVar keeps concurrent requests apart
_context_vars: ContextVar[dict[str, str]] = ContextVar("studio_log_context", default={})


def add_request_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add request context (request_id, account_id, workspace_id) to log entries."""
    context = _context_vars.get()
    if context:
        for key, value in context.items():
            event_dict.setdefault(key, value)
    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service information to log entries."""
    event_dict["service"] = "studio-review"
    return event_dict


def configure_structlog(
    json_format: bool = True,
    log_level: str = "INFO",
) -> None:
    """Configure structlog for the application.

    Args:
        json_format: If True, output JSON logs (for production).
                     If False, output human-readable logs (for development).
        log_level: The minimum log level to output (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_service_info,
        add_request_context,
    ]

    if json_format:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger with the given name.

    Example:
        logger = get_logger(__name__)
        logger.info("approval_committed", post_id=str(post.id))
    """
    return structlog.get_logger(name)


def bind_context(
    request_id: Optional[str] = None,
    account_id: Optional[UUID] = None,
    workspace_id: Optional[UUID] = None,
) -> None:
    """Bind context variables for the current request scope.

    These values will be included in all subsequent log entries
    until clear_context() is called.
    """
    context = dict(_context_vars.get())
    if request_id:
        context["request_id"] = request_id
    if account_id:
        context["account_id"] = str(account_id)
    if workspace_id:
        context["workspace_id"] = str(workspace_id)
    _context_vars.set(context)


def clear_context() -> None:
    """Clear all bound context variables.

    Should be called at the end of request processing.
    """
    _context_vars.set({})


def current_context() -> dict[str, str]:
    """Return a copy of the currently bound context."""
    return dict(_context_vars.get())


# Initialize with defaults from config.
# Can be reconfigured by calling configure_structlog() at startup.
configure_structlog(json_format=LOG_FORMAT == "json", log_level=LOG_LEVEL)
