"""
Acting principal and role checks.

The upstream authentication layer stores an ActingPrincipal (or a mapping
with "id" and "role") on request.state.principal.
"""

import enum
import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Principal roles."""
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


ELEVATED_ROLES = frozenset({Role.ADMIN, Role.EDITOR})


@dataclass(frozen=True)
class ActingPrincipal:
    """Identity acting on ingestion jobs."""
    id: str
    role: Role = Role.VIEWER

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    @classmethod
    def from_state(cls, value) -> "ActingPrincipal":
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(id=str(value["id"]), role=Role(value.get("role", Role.VIEWER)))
        raise ValueError(f"Unsupported principal type: {type(value).__name__}")


def get_current_principal(request: Request) -> ActingPrincipal:
    """
    FastAPI dependency returning the authenticated principal.

    Raises HTTPException 401 if no principal is attached to the request.
    """
    raw = getattr(request.state, "principal", None)
    if raw is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return ActingPrincipal.from_state(raw)
    except (KeyError, ValueError) as e:
        logger.warning("Malformed principal on request", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_elevated_principal(
    principal: ActingPrincipal = Depends(get_current_principal),
) -> ActingPrincipal:
    """
    FastAPI dependency requiring an editor or admin principal.

    Raises HTTPException 403 for other roles.
    """
    if not principal.is_elevated:
        logger.warning(
            "Ingestion access denied - insufficient role",
            extra={"principal_id": principal.id, "role": principal.role.value},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor or admin role required",
        )
    return principal
