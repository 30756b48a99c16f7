"""FastAPI dependencies for authentication and the per-request pipeline.

Provides:
- get_store: the process-wide review store
- get_identity_provider: the configured identity provider
- get_studio_client: a StudioClient signed in with the request's bearer
  token, with its membership directory freshly loaded

Nothing here makes authorization decisions; routes call the client, and the
client checks capabilities against the specific workspace.
"""

from functools import lru_cache
from typing import AsyncIterator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.exceptions import AuthenticationError
from studio import StudioClient
from studio.db import get_engine
from studio.identity import BaseIdentityProvider, get_provider
from studio.logging import bind_context
from studio.resilience import DEFAULT_POLICY
from studio.store import ReviewStore, SQLReviewStore

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_store() -> ReviewStore:
    """Review store shared by all requests."""
    return SQLReviewStore(get_engine())


def get_identity_provider() -> BaseIdentityProvider:
    return get_provider()


async def get_studio_client(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: ReviewStore = Depends(get_store),
    provider: BaseIdentityProvider = Depends(get_identity_provider),
) -> AsyncIterator[StudioClient]:
    """Sign a fresh client in with the request's bearer token.

    Raises:
        AuthenticationError: Missing credentials (401)
        UnauthorizedError: Invalid or expired token (401, AUTHENTICATION_FAILED)
    """
    if not credentials:
        raise AuthenticationError("Missing authentication credentials")

    client = StudioClient(store, provider=provider, retry_policy=DEFAULT_POLICY)
    try:
        account = await client.sign_in(credentials.credentials)
        bind_context(account_id=account.id)
        yield client
    finally:
        client.close()
