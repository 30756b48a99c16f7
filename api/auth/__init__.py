"""Authentication dependencies for the API."""

from api.auth.dependencies import (
    get_identity_provider,
    get_store,
    get_studio_client,
    security,
)

__all__ = [
    "get_identity_provider",
    "get_store",
    "get_studio_client",
    "security",
]
