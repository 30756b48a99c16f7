"""Identity provider abstraction.

Identity providers verify tokens and report who the caller is. They are NOT
responsible for authorization: global roles and workspace memberships live
in the store and are resolved by the membership directory.

The provider is selected via the IDENTITY_PROVIDER environment variable:

    IDENTITY_PROVIDER=local  (default) - HS256 JWT with a shared secret
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional
from uuid import UUID

from studio.identity.jwt import VALID_ACCESS_TOKEN_TYPES, verify_token as jwt_verify_token
from studio.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Account:
    """An authenticated identity as reported by the identity provider."""

    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or str(self.id)


@dataclass
class AuthResult:
    """Result of token verification.

    Attributes:
        valid: Whether the token was successfully verified
        account_id: Account id from the provider (UUID string)
        email: Account email from the provider
        full_name: Display name from the provider
        provider: Name of the identity provider
        error: Error message if validation failed
        raw_claims: Full token claims for debugging/auditing
    """

    valid: bool
    account_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    provider: str = "unknown"
    error: Optional[str] = None
    raw_claims: Optional[dict] = field(default=None)

    def to_account(self) -> Optional[Account]:
        """Build an Account from a successful result, None otherwise."""
        if not self.valid or not self.account_id:
            return None
        try:
            account_id = UUID(self.account_id)
        except ValueError:
            return None
        return Account(id=account_id, email=self.email, full_name=self.full_name)


class BaseIdentityProvider(ABC):
    """Abstract base class for identity providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider (e.g., 'local')."""
        ...

    @abstractmethod
    async def verify_token(self, token: str) -> AuthResult:
        """Verify an authentication token and extract the identity."""
        ...

    @abstractmethod
    async def sign_out(self, account: Account) -> None:
        """End the provider-side session for an account."""
        ...


class LocalIdentityProvider(BaseIdentityProvider):
    """Local JWT identity provider (HS256, shared JWT_SECRET)."""

    @property
    def name(self) -> str:
        return "local"

    async def verify_token(self, token: str) -> AuthResult:
        """Verify a local JWT token.

        The account id comes from the 'sub' claim; 'email' and 'name'
        claims are optional.
        """
        payload = jwt_verify_token(token)

        if not payload:
            return AuthResult(
                valid=False,
                provider=self.name,
                error="Invalid or expired token",
            )

        token_type = payload.get("type", "access")
        if token_type not in VALID_ACCESS_TOKEN_TYPES:
            return AuthResult(
                valid=False,
                provider=self.name,
                error="Invalid token type for this endpoint",
            )

        account_id = payload.get("sub")
        if not account_id:
            return AuthResult(
                valid=False,
                provider=self.name,
                error="Invalid token payload: missing 'sub' claim",
            )

        return AuthResult(
            valid=True,
            account_id=account_id,
            email=payload.get("email"),
            full_name=payload.get("name"),
            provider=self.name,
            raw_claims=payload,
        )

    async def sign_out(self, account: Account) -> None:
        # Stateless tokens: nothing to revoke server-side
        logger.info("identity_signed_out", provider=self.name, account_id=str(account.id))


@lru_cache(maxsize=1)
def get_provider() -> BaseIdentityProvider:
    """Get the configured identity provider.

    Note: The provider is cached. Use clear_provider_cache() to reset
    after changing IDENTITY_PROVIDER (mainly for testing).

    Raises:
        ValueError: If IDENTITY_PROVIDER is set to an unknown value
    """
    # Read env var at call time, not import time
    provider_name = os.getenv("IDENTITY_PROVIDER", "local").lower()

    if provider_name == "local":
        return LocalIdentityProvider()

    raise ValueError(
        f"Unknown IDENTITY_PROVIDER: {provider_name}. "
        f"Supported values: local"
    )


def clear_provider_cache() -> None:
    """Clear the cached provider instance."""
    get_provider.cache_clear()
