"""
Tenant management endpoints.

Tenants carry no hooks or privacy policy; access is checked here.
"""

import structlog
from fastapi import APIRouter, Query, status

from authsvc.core.authz import ADMIN_ROLE, has_any_role
from authsvc.core.exceptions import forbidden
from authsvc.features.auth.dependencies import AdminContext, CurrentContext, DbClients
from authsvc.models.tenant import Tenant
from authsvc.schemas.tenant import TenantCreate, TenantRead, TenantUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.get("/", response_model=list[TenantRead])
async def list_tenants(
    ctx: AdminContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
) -> list[Tenant]:
    """
    List all tenants (admin only).

    Other users can only see their own tenant via GET /tenants/me
    """
    return list(await db_clients.tenant.list(ctx, skip=skip, limit=limit))


@router.post("/", response_model=TenantRead, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    payload: TenantCreate,
    ctx: AdminContext,
    db_clients: DbClients,
) -> Tenant:
    """Create a tenant (admin only). Duplicate slug or domain returns 409."""
    tenant = await db_clients.tenant.create(ctx, **payload.model_dump())
    logger.info("tenant_created", tenant_id=tenant.id, slug=tenant.slug, by=ctx.user_id)
    return tenant


@router.get("/me", response_model=TenantRead)
async def get_my_tenant(
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Tenant:
    """Any authenticated user can read their own tenant."""
    return await db_clients.tenant.get(ctx, ctx.tenant_id)


@router.get("/{tenant_id}", response_model=TenantRead)
async def get_tenant(
    tenant_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Tenant:
    """
    Get specific tenant by ID.

    - Admins: Can access any tenant
    - Other users: Can only access their own tenant
    """
    if tenant_id != ctx.tenant_id and not has_any_role(ctx, [ADMIN_ROLE]):
        raise forbidden("Access to this tenant is not allowed")
    return await db_clients.tenant.get(ctx, tenant_id)


@router.patch("/{tenant_id}", response_model=TenantRead)
async def update_tenant(
    tenant_id: int,
    payload: TenantUpdate,
    ctx: AdminContext,
    db_clients: DbClients,
) -> Tenant:
    """Update tenant settings (admin only). The slug is fixed."""
    tenant = await db_clients.tenant.update_one(
        ctx, tenant_id, **payload.model_dump(exclude_unset=True)
    )
    logger.info("tenant_updated", tenant_id=tenant_id, by=ctx.user_id)
    return tenant


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: int,
    ctx: AdminContext,
    db_clients: DbClients,
) -> None:
    """Delete a tenant (admin only). The caller's own tenant cannot be deleted."""
    if tenant_id == ctx.tenant_id:
        raise forbidden("Cannot delete your own tenant")
    await db_clients.tenant.delete_one(ctx, tenant_id)
    logger.info("tenant_deleted", tenant_id=tenant_id, by=ctx.user_id)
