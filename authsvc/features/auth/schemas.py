"""
Authentication-specific schemas.
"""

from pydantic import Field

from authsvc.schemas.common import BaseSchema
from authsvc.schemas.role import RoleRead
from authsvc.schemas.user import UserRead


class LoginRequest(BaseSchema):
    """Login request schema."""

    identifier: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1, description="User password")


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")


class LoginResponse(TokenResponse):
    user: UserRead


class RefreshTokenRequest(BaseSchema):
    """Refresh token request."""

    refresh_token: str = Field(..., description="Valid refresh token")


class LogoutRequest(BaseSchema):
    refresh_token: str | None = Field(None, description="Refresh token to revoke as well")


class PermissionGrantRead(BaseSchema):
    name: str
    resource: str
    can_read: bool
    can_create: bool
    can_update: bool
    can_delete: bool


class CurrentUserResponse(BaseSchema):
    """The authenticated user with their role and effective grants."""

    user: UserRead
    role: RoleRead | None = None
    permissions: list[PermissionGrantRead] = []
