"""Structured logging for the review core."""

from studio.logging.structured import (
    configure_structlog,
    get_logger,
    bind_context,
    clear_context,
    current_context,
)

__all__ = [
    "configure_structlog",
    "get_logger",
    "bind_context",
    "clear_context",
    "current_context",
]
