"""Identity: who the caller is, and when that changes."""

from studio.identity.providers import (
    Account,
    AuthResult,
    BaseIdentityProvider,
    LocalIdentityProvider,
    get_provider,
    clear_provider_cache,
)
from studio.identity.session import IdentitySession, IdentityListener

__all__ = [
    "Account",
    "AuthResult",
    "BaseIdentityProvider",
    "LocalIdentityProvider",
    "get_provider",
    "clear_provider_cache",
    "IdentitySession",
    "IdentityListener",
]
