"""JWT helpers for identity-service access tokens.

Tokens are minted by the identity service; this service only verifies them.
`create_access_token` exists for tooling and tests that need a signed token
with the same claim layout.
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from src.app.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    subject: str | UUID,
    roles: Iterable[str],
    tenant_id: str | UUID | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create JWT access token carrying the actor's roles and tenant."""
    settings = get_settings()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "roles": sorted(set(roles)),
        "exp": expire,
        "type": ACCESS_TOKEN_TYPE,
    }
    if tenant_id is not None:
        to_encode["tenant_id"] = str(tenant_id)

    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT token. Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
