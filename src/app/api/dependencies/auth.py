"""Authentication dependencies.

Identity is owned by a separate service. Requests carry its bearer token;
the actor (id, roles, tenant) is taken from the verified claims.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from src.app.core.logging import bind_actor_context
from src.app.core.security import ACCESS_TOKEN_TYPE, decode_token
from src.app.orchestration.actors import SYSTEM_ROLE, Actor


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """Build an Actor from verified token claims.

    Raises:
        HTTPException: 401 if a claim is missing or malformed.
    """
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    try:
        actor_id = UUID(str(payload.get("sub", "")))
    except ValueError as e:
        raise _unauthorized("Invalid subject in token") from e

    tenant_id = None
    if payload.get("tenant_id"):
        try:
            tenant_id = UUID(str(payload["tenant_id"]))
        except ValueError as e:
            raise _unauthorized("Invalid tenant_id in token") from e

    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        raise _unauthorized("Invalid roles in token")
    # The system principal is internal only and never granted by a token
    return Actor(
        id=actor_id,
        roles=frozenset(str(r) for r in roles if r != SYSTEM_ROLE),
        tenant_id=tenant_id,
    )


async def get_current_actor(
    authorization: Annotated[str | None, Header()] = None,
) -> Actor:
    """Validate the bearer token and return the acting principal."""
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Missing or invalid authorization header")

    payload = decode_token(authorization[7:])
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    actor = actor_from_claims(payload)
    bind_actor_context(actor.id, actor.tenant_id, actor.roles)
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
