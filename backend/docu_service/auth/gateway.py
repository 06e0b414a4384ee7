"""
Principal middleware for deployments behind an authenticating gateway.

The gateway authenticates the caller and forwards its identity as
X-Principal-Id / X-Principal-Role headers. This middleware copies them onto
request.state.principal. It must only be enabled when the service is not
reachable except through that gateway.
"""

import logging

from fastapi import Request

from docu_service.auth.principal import ActingPrincipal, Role

logger = logging.getLogger(__name__)

PRINCIPAL_ID_HEADER = "X-Principal-Id"
PRINCIPAL_ROLE_HEADER = "X-Principal-Role"


class GatewayPrincipalMiddleware:
    """Attach the gateway-forwarded principal to request.state."""

    async def __call__(self, request: Request, call_next):
        principal_id = request.headers.get(PRINCIPAL_ID_HEADER)
        if principal_id:
            raw_role = (request.headers.get(PRINCIPAL_ROLE_HEADER) or Role.VIEWER.value).strip().lower()
            try:
                role = Role(raw_role)
            except ValueError:
                logger.warning(
                    "Unknown principal role from gateway, treating as viewer",
                    extra={"principal_id": principal_id, "role": raw_role},
                )
                role = Role.VIEWER
            request.state.principal = ActingPrincipal(id=principal_id, role=role)

        return await call_next(request)
