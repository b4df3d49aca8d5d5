"""
Internal lookup endpoints for other services.

Privacy rules are bypassed: callers are trusted services, identified by
the X-Internal-Key header when settings.internal_api_key is configured.
"""

import secrets
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel

from authsvc.config import settings
from authsvc.core.authz import AuthContext
from authsvc.core.exceptions import ResourceNotFoundError, unauthorized
from authsvc.features.auth.dependencies import DbClients
from authsvc.schemas.common import BaseSchema, IdsRequest
from authsvc.schemas.role import PermissionRead, RolePermissionRead, RoleRead
from authsvc.schemas.user import UserRead

logger = structlog.get_logger(__name__)

SYSTEM_CONTEXT = AuthContext.system()


async def verify_internal_key(
    x_internal_key: Annotated[str | None, Header()] = None,
) -> None:
    expected = settings.internal_api_key
    if expected is None:
        return
    if x_internal_key is None or not secrets.compare_digest(x_internal_key, expected):
        logger.warning("internal_key_rejected")
        raise unauthorized("Invalid internal key")


router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_key)],
)


class ValidateUserResponse(BaseSchema):
    valid: bool
    user: UserRead | None = None


def _register_lookups(path: str, client_attr: str, read_schema: type[BaseModel]) -> None:
    """Add GET /{path}/{id} and POST /{path}/batch for one entity."""

    @router.get(
        f"/{path}/{{item_id}}",
        response_model=read_schema,
        name=f"get_{client_attr}_by_id",
    )
    async def get_by_id(item_id: int, db_clients: DbClients):
        return await getattr(db_clients, client_attr).get(SYSTEM_CONTEXT, item_id)

    @router.post(
        f"/{path}/batch",
        response_model=list[read_schema],
        name=f"get_{client_attr}s_by_ids",
    )
    async def get_by_ids(payload: IdsRequest, db_clients: DbClients):
        """Rows for the IDs that exist; unknown IDs are left out."""
        return list(await getattr(db_clients, client_attr).get_many(SYSTEM_CONTEXT, payload.ids))


_register_lookups("users", "user", UserRead)
_register_lookups("roles", "role", RoleRead)
_register_lookups("permissions", "permission", PermissionRead)
_register_lookups("role-permissions", "role_permission", RolePermissionRead)


@router.get("/users/{user_id}/validate", response_model=ValidateUserResponse)
async def validate_user(user_id: int, db_clients: DbClients) -> ValidateUserResponse:
    """A user ID is valid when the user exists."""
    try:
        user = await db_clients.user.get(SYSTEM_CONTEXT, user_id)
    except ResourceNotFoundError:
        return ValidateUserResponse(valid=False)
    return ValidateUserResponse(valid=True, user=UserRead.model_validate(user))
