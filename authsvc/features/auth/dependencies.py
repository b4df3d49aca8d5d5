"""
Authentication dependencies for dependency injection.

Routes receive an AuthContext built from the bearer token and the cached
user data; the context is then passed explicitly to the entity clients.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from authsvc.core.authz import ADMIN_ROLE, AuthContext, has_any_role
from authsvc.core.context import set_request_context
from authsvc.core.database import get_db
from authsvc.core.exceptions import AuthenticationError, forbidden, unauthorized
from authsvc.features.auth.service import auth_service
from authsvc.mutations.client import Clients, clients

logger = structlog.get_logger(__name__)

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthContext:
    """
    Resolve the caller from a JWT access token.

    User data (role and permission grants) comes from the cache and falls
    back to the database on a miss.
    """
    if not credentials:
        raise unauthorized("Authentication required")

    try:
        payload = await auth_service.access_payload(credentials.credentials)
        user_id = int(payload["sub"])
    except AuthenticationError as e:
        raise unauthorized(e.message)
    except (KeyError, TypeError, ValueError):
        raise unauthorized("Invalid token payload")

    data = await auth_service.get_user_data(db, user_id)
    if data is None:
        logger.warning("token_user_not_found", user_id=user_id)
        raise unauthorized("User not found")

    if not data["user"]["is_active"]:
        raise forbidden("User account is inactive")

    ctx = auth_service.context_from_user_data(data)

    request.state.user_id = ctx.user_id
    request.state.tenant_id = ctx.tenant_id
    set_request_context(
        user_id=ctx.user_id,
        tenant_id=ctx.tenant_id,
    )
    return ctx


def require_role(role_name: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/tenants")
        async def list_tenants(
            ctx: AuthContext = Depends(require_role("admin"))
        ):
            ...
    """
    async def role_checker(
        ctx: Annotated[AuthContext, Depends(get_auth_context)],
    ) -> AuthContext:
        if not has_any_role(ctx, [role_name]):
            raise forbidden(f"Role required: {role_name}")
        return ctx

    return role_checker


async def get_clients(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Clients:
    return clients(db)


# Type aliases for cleaner code
CurrentContext = Annotated[AuthContext, Depends(get_auth_context)]
AdminContext = Annotated[AuthContext, Depends(require_role(ADMIN_ROLE))]
DbClients = Annotated[Clients, Depends(get_clients)]
