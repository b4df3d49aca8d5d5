"""
Role management endpoints.

Role codes are generated from the tenant and name on create and never
change afterwards. Changing a role drops every cached user, since cached
contexts carry role names and grants.
"""

import structlog
from fastapi import APIRouter, Query, status

from authsvc.core.cache import invalidate_user_cache
from authsvc.features.auth.dependencies import CurrentContext, DbClients
from authsvc.models.role import Role, RolePermission
from authsvc.schemas.common import PaginatedResponse
from authsvc.schemas.role import RoleCreate, RolePermissionRead, RoleRead, RoleUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get("/", response_model=PaginatedResponse[RoleRead])
async def list_roles(
    ctx: CurrentContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> PaginatedResponse[RoleRead]:
    roles = await db_clients.role.list(ctx, skip=skip, limit=limit)
    total = await db_clients.role.count(ctx)
    return PaginatedResponse[RoleRead](
        items=[RoleRead.model_validate(r) for r in roles],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Role:
    role = await db_clients.role.create(ctx, **payload.model_dump())
    logger.info("role_created", role_id=role.id, code=role.code, by=ctx.user_id)
    return role


@router.get("/{role_id}", response_model=RoleRead)
async def get_role(
    role_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Role:
    return await db_clients.role.get(ctx, role_id)


@router.get("/{role_id}/permissions", response_model=list[RolePermissionRead])
async def list_role_permissions(
    role_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> list[RolePermission]:
    """Grants attached to a role, within the caller's tenant."""
    await db_clients.role.get(ctx, role_id)
    grants = await db_clients.role_permission.list(
        ctx, RolePermission.role_id == role_id, limit=1000
    )
    return list(grants)


@router.patch("/{role_id}", response_model=RoleRead)
async def update_role(
    role_id: int,
    payload: RoleUpdate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> Role:
    role = await db_clients.role.update_one(ctx, role_id, **payload.model_dump(exclude_unset=True))
    await db_clients.commit()
    await invalidate_user_cache()
    return role


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> None:
    await db_clients.role.delete_one(ctx, role_id)
    await db_clients.commit()
    await invalidate_user_cache()
    logger.info("role_deleted", role_id=role_id, by=ctx.user_id)
