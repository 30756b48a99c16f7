"""Authorization and approval core for agency/client post review."""

from studio.client import StudioClient

__all__ = [
    "StudioClient",
]
