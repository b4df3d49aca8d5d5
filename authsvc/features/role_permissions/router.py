"""
Role-permission grant endpoints.

Grants are tenant-scoped: reads are filtered to the caller's tenant and
updates/deletes of another tenant's grant are denied by the privacy policy.
"""

import structlog
from fastapi import APIRouter, Query, status

from authsvc.core.cache import invalidate_user_cache
from authsvc.features.auth.dependencies import CurrentContext, DbClients
from authsvc.models.role import RolePermission
from authsvc.schemas.common import PaginatedResponse
from authsvc.schemas.role import (
    RolePermissionCreate,
    RolePermissionRead,
    RolePermissionUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/role-permissions", tags=["Role Permissions"])


@router.get("/", response_model=PaginatedResponse[RolePermissionRead])
async def list_grants(
    ctx: CurrentContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    role_id: int | None = None,
) -> PaginatedResponse[RolePermissionRead]:
    where = [] if role_id is None else [RolePermission.role_id == role_id]
    grants = await db_clients.role_permission.list(ctx, *where, skip=skip, limit=limit)
    total = await db_clients.role_permission.count(ctx, *where)
    return PaginatedResponse[RolePermissionRead](
        items=[RolePermissionRead.model_validate(g) for g in grants],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=RolePermissionRead, status_code=status.HTTP_201_CREATED)
async def create_grant(
    payload: RolePermissionCreate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> RolePermission:
    """Grant a permission to a role. A second grant for the same pair returns 409."""
    grant = await db_clients.role_permission.create(ctx, **payload.model_dump())
    await db_clients.commit()
    await invalidate_user_cache()
    logger.info(
        "permission_granted",
        role_id=grant.role_id,
        permission_id=grant.permission_id,
        by=ctx.user_id,
    )
    return grant


@router.get("/{grant_id}", response_model=RolePermissionRead)
async def get_grant(
    grant_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> RolePermission:
    return await db_clients.role_permission.get(ctx, grant_id)


@router.patch("/{grant_id}", response_model=RolePermissionRead)
async def update_grant(
    grant_id: int,
    payload: RolePermissionUpdate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> RolePermission:
    grant = await db_clients.role_permission.update_one(
        ctx, grant_id, **payload.model_dump(exclude_unset=True)
    )
    await db_clients.commit()
    await invalidate_user_cache()
    return grant


@router.delete("/{grant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_grant(
    grant_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> None:
    await db_clients.role_permission.delete_one(ctx, grant_id)
    await db_clients.commit()
    await invalidate_user_cache()
