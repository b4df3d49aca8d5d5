"""
Authentication endpoints.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from authsvc.core.cache import invalidate_cached_user
from authsvc.core.database import get_db
from authsvc.core.exceptions import not_found
from authsvc.features.auth.dependencies import CurrentContext, bearer_scheme
from authsvc.features.auth.schemas import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    RefreshTokenRequest,
    TokenResponse,
)
from authsvc.features.auth.service import auth_service
from authsvc.models import Role, User
from authsvc.schemas.common import MessageResponse
from authsvc.schemas.role import RoleRead
from authsvc.schemas.user import UserRead

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LoginResponse:
    """
    OAuth2 compatible token login.

    The form's 'username' may be an email or a username.
    """
    return await auth_service.login(db, form_data.username, form_data.password)


@router.post("/login/json", response_model=LoginResponse)
async def login_json(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LoginResponse:
    """Login with JSON body (alternative to form data)."""
    return await auth_service.login(db, login_data.identifier, login_data.password)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    return await auth_service.refresh_access_token(db, refresh_data.refresh_token)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(
    ctx: CurrentContext,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CurrentUserResponse:
    """The authenticated user with role and effective permission grants."""
    user = await db.get(User, ctx.user_id)
    if user is None:
        raise not_found("User not found")

    role = await db.get(Role, user.role_id) if user.role_id is not None else None

    return CurrentUserResponse(
        user=UserRead.model_validate(user),
        role=RoleRead.model_validate(role) if role is not None else None,
        permissions=[grant.to_dict() for grant in ctx.permissions],
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    ctx: CurrentContext,
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    payload: LogoutRequest | None = None,
) -> MessageResponse:
    """
    Logout endpoint.

    Revokes the bearer access token (and the refresh token, when given)
    and drops the cached user data.
    """
    await auth_service.revoke(credentials.credentials)
    if payload is not None and payload.refresh_token:
        await auth_service.revoke(payload.refresh_token)

    await invalidate_cached_user(ctx.user_id)
    logger.info("user_logged_out", user_id=ctx.user_id)
    return MessageResponse(message="Successfully logged out")
