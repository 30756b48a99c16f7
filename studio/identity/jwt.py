"""JWT token utilities for the local identity provider."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt

from studio import config

# Valid token types for API access
VALID_ACCESS_TOKEN_TYPES = ("access",)


def _secret() -> str:
    secret = config.JWT_SECRET
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is required. "
            "Set it to a secure random string (e.g., openssl rand -hex 32)"
        )
    return secret


def create_access_token(
    data: dict,
    token_type: str = "access",
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data (should include 'sub' for the account id,
              optionally 'email' and 'name')
        token_type: Token type claim
        expires_minutes: Override for ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else config.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.utcnow() + timedelta(minutes=minutes)
    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.utcnow(),
            "type": token_type,
            "jti": str(uuid4()),
        }
    )
    return jwt.encode(to_encode, _secret(), algorithm=config.JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Verify and decode a JWT token.

    Returns:
        Decoded payload dict if valid, None if invalid/expired
    """
    try:
        return jwt.decode(token, _secret(), algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None
