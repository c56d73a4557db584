"""Authentication and authorization dependencies."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.crm.core.errors import UnauthenticatedError
from src.crm.core.logging import bind_actor_context
from src.crm.core.security import ACCESS_TOKEN_TYPE, decode_token

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Actor:
    """The caller, as identified by a verified bearer token."""

    id: str
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


async def get_current_actor(
    authorization: Annotated[str | None, Header()] = None,
) -> Actor:
    """Validate the bearer token and return the actor it names.

    The token's ``sub`` becomes the actor id recorded on every write.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Missing or invalid authorization header")

    payload = decode_token(authorization[7:])
    if payload is None:
        raise UnauthenticatedError("Invalid or expired token")

    if payload.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        raise UnauthenticatedError("Invalid token type")

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise UnauthenticatedError("Invalid token payload")

    bind_actor_context(subject)
    return Actor(id=subject, role=payload.get("role"))


CurrentActor = Annotated[Actor, Depends(get_current_actor)]


async def require_admin_role(actor: CurrentActor) -> Actor:
    """Require the caller to hold the admin role (phase catalog maintenance)."""
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required for this operation",
        )
    return actor


AdminActor = Annotated[Actor, Depends(require_admin_role)]
