"""
Permission catalogue endpoints.

Permissions are global (not tenant-scoped) and have no privacy policy:
any authenticated user may read them, only admins may change them.
"""

import structlog
from fastapi import APIRouter, Query, status

from authsvc.core.cache import invalidate_user_cache
from authsvc.features.auth.dependencies import AdminContext, CurrentContext, DbClients
from authsvc.models.role import Permission
from authsvc.schemas.common import PaginatedResponse
from authsvc.schemas.role import PermissionCreate, PermissionRead, PermissionUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/", response_model=PaginatedResponse[PermissionRead])
async def list_permissions(
    ctx: CurrentContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    resource: str | None = None,
) -> PaginatedResponse[PermissionRead]:
    where = [] if resource is None else [Permission.resource == resource]
    permissions = await db_clients.permission.list(ctx, *where, skip=skip, limit=limit)
    total = await db_clients.permission.count(ctx, *where)
    return PaginatedResponse[PermissionRead](
        items=[PermissionRead.model_validate(p) for p in permissions],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=PermissionRead, status_code=status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreate,
    ctx: AdminContext,
    db_clients: DbClients,
) -> Permission:
    permission = await db_clients.permission.create(ctx, **payload.model_dump())
    logger.info("permission_created", permission=permission.name, by=ctx.user_id)
    return permission


@router.get("/{permission_id}", response_model=PermissionRead)
async def get_permission(
    permission_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Permission:
    return await db_clients.permission.get(ctx, permission_id)


@router.patch("/{permission_id}", response_model=PermissionRead)
async def update_permission(
    permission_id: int,
    payload: PermissionUpdate,
    ctx: AdminContext,
    db_clients: DbClients,
) -> Permission:
    permission = await db_clients.permission.update_one(
        ctx, permission_id, **payload.model_dump(exclude_unset=True)
    )
    await db_clients.commit()
    await invalidate_user_cache()
    return permission


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: int,
    ctx: AdminContext,
    db_clients: DbClients,
) -> None:
    await db_clients.permission.delete_one(ctx, permission_id)
    await db_clients.commit()
    await invalidate_user_cache()
