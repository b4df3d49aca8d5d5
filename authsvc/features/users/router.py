"""
User management endpoints.

Reads are restricted to the caller's tenant by the User privacy policy;
writes need the admin role or the matching flag on the "users" resource.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Query, status

from authsvc.core.cache import invalidate_cached_user
from authsvc.core.authz import ADMIN_ROLE, has_any_role
from authsvc.core.exceptions import bad_request, forbidden
from authsvc.core.security import hash_password
from authsvc.features.auth.dependencies import CurrentContext, DbClients
from authsvc.models.user import User
from authsvc.schemas.common import PaginatedResponse
from authsvc.schemas.user import UserCreate, UserRead, UserUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _with_password_hash(data: dict[str, Any]) -> dict[str, Any]:
    password = data.pop("password", None)
    if password is not None:
        data["password_hash"] = hash_password(password)
    return data


@router.get("/", response_model=PaginatedResponse[UserRead])
async def list_users(
    ctx: CurrentContext,
    db_clients: DbClients,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    is_active: bool | None = None,
) -> PaginatedResponse[UserRead]:
    where = [] if is_active is None else [User.is_active.is_(is_active)]
    users = await db_clients.user.list(ctx, *where, skip=skip, limit=limit)
    total = await db_clients.user.count(ctx, *where)
    return PaginatedResponse[UserRead](
        items=[UserRead.model_validate(u) for u in users],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> User:
    """Create a user in the caller's tenant. Duplicate email/username returns 409."""
    user = await db_clients.user.create(ctx, **_with_password_hash(payload.model_dump()))
    logger.info("user_created", user_id=user.id, by=ctx.user_id)
    return user


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> User:
    return await db_clients.user.get(ctx, user_id)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> User:
    """Only admins may change a user's role."""
    data = _with_password_hash(payload.model_dump(exclude_unset=True))
    if "role_id" in data and not has_any_role(ctx, [ADMIN_ROLE]):
        raise forbidden("Only admins can change a user's role")
    user = await db_clients.user.update_one(ctx, user_id, **data)
    await db_clients.commit()
    await invalidate_cached_user(user_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    ctx: CurrentContext,
    db_clients: DbClients,
) -> None:
    if user_id == ctx.user_id:
        raise bad_request("Cannot delete your own account")
    await db_clients.user.delete_one(ctx, user_id)
    await db_clients.commit()
    await invalidate_cached_user(user_id)
    logger.info("user_deleted", user_id=user_id, by=ctx.user_id)
