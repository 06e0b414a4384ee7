"""
Acting principal for ingestion requests.

Authentication itself happens upstream; by the time a request reaches the
ingestion routes the authenticated principal (id + role) is attached to
request.state.principal.
"""

from docu_service.auth.gateway import GatewayPrincipalMiddleware
from docu_service.auth.principal import (
    ActingPrincipal,
    Role,
    ELEVATED_ROLES,
    get_current_principal,
    require_elevated_principal,
)

__all__ = [
    "ActingPrincipal",
    "Role",
    "ELEVATED_ROLES",
    "get_current_principal",
    "require_elevated_principal",
    "GatewayPrincipalMiddleware",
]
