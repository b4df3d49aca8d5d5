"""
Authentication business logic.
"""

import secrets
from datetime import datetime, timezone
from typing import Any

import structlog
from jose import JWTError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from authsvc.config import settings
from authsvc.core.authz import AuthContext, PermissionGrant
from authsvc.core.cache import (
    get_cached_user,
    is_token_valid,
    revoke_token,
    set_cached_user,
    whitelist_token,
)
from authsvc.core.exceptions import AuthenticationError
from authsvc.core.metrics import logins_total
from authsvc.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    is_password_hashed,
    remaining_ttl,
    verify_password,
)
from authsvc.features.auth.schemas import LoginResponse, TokenResponse
from authsvc.models import Permission, Role, RolePermission, User
from authsvc.mutations.client import clients
from authsvc.schemas.user import UserRead

logger = structlog.get_logger(__name__)


class AuthService:
    """Authentication service with business logic."""

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        identifier: str,
        password: str,
    ) -> User:
        """
        Authenticate user by email or username and password.

        A password stored in plaintext is verified by comparison, then
        hashed and written back.

        Raises:
            AuthenticationError: Unknown user, wrong password or inactive account
        """
        result = await db.execute(
            select(User).where(or_(User.email == identifier, User.username == identifier))
        )
        user = result.scalar_one_or_none()

        if user is None:
            logins_total.labels(outcome="unknown_user").inc()
            logger.warning("login_unknown_user", identifier=identifier)
            raise AuthenticationError("Invalid credentials")

        if is_password_hashed(user.password_hash):
            valid = verify_password(password, user.password_hash)
        else:
            valid = secrets.compare_digest(password.encode(), user.password_hash.encode())

        if not valid:
            logins_total.labels(outcome="bad_password").inc()
            logger.warning("login_bad_password", user_id=user.id)
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            logins_total.labels(outcome="inactive").inc()
            logger.warning("login_inactive_user", user_id=user.id)
            raise AuthenticationError("User account is inactive")

        updates: dict[str, Any] = {"last_login": datetime.now(timezone.utc)}
        if not is_password_hashed(user.password_hash):
            logger.info("password_rehashed", user_id=user.id)
            updates["password_hash"] = hash_password(password)

        ctx = AuthContext.system(tenant_id=user.tenant_id)
        user = await clients(db).user.update_one(ctx, user.id, **updates)

        logins_total.labels(outcome="success").inc()
        logger.info("user_authenticated", user_id=user.id, tenant_id=user.tenant_id)
        return user

    @staticmethod
    async def load_user_data(db: AsyncSession, user: User) -> dict[str, Any]:
        """Collect profile, role and active permission grants for caching."""
        role: Role | None = None
        grants: list[PermissionGrant] = []

        if user.role_id is not None:
            role = await db.get(Role, user.role_id)

        if role is not None and role.is_active:
            result = await db.execute(
                select(RolePermission, Permission)
                .join(Permission, RolePermission.permission_id == Permission.id)
                .where(
                    RolePermission.role_id == role.id,
                    Permission.is_active.is_(True),
                )
                .order_by(Permission.name)
            )
            grants = [
                PermissionGrant(
                    name=permission.name,
                    resource=permission.resource,
                    can_read=grant.can_read,
                    can_create=grant.can_create,
                    can_update=grant.can_update,
                    can_delete=grant.can_delete,
                )
                for grant, permission in result.all()
            ]

        return {
            "user": UserRead.model_validate(user).model_dump(mode="json"),
            "role": None if role is None else {
                "id": role.id,
                "name": role.name,
                "display_name": role.display_name,
                "code": role.code,
                "priority": role.priority,
                "is_active": role.is_active,
            },
            "permissions": [grant.to_dict() for grant in grants],
            "cached_at": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def context_from_user_data(data: dict[str, Any]) -> AuthContext:
        """Build the invocation context from cached user data."""
        user = data["user"]
        role = data.get("role")
        roles = (role["name"],) if role and role.get("is_active", True) else ()
        return AuthContext(
            user_id=user["id"],
            tenant_id=user["tenant_id"],
            username=user["username"],
            roles=roles,
            permissions=tuple(PermissionGrant(**grant) for grant in data.get("permissions", [])),
        )

    @staticmethod
    async def get_user_data(db: AsyncSession, user_id: int) -> dict[str, Any] | None:
        """Cached user data, falling back to the database (and re-caching)."""
        cached = await get_cached_user(user_id)
        if cached is not None:
            return cached

        user = await db.get(User, user_id)
        if user is None:
            return None

        data = await AuthService.load_user_data(db, user)
        await set_cached_user(user_id, data)
        return data

    @staticmethod
    async def generate_tokens(user: User) -> TokenResponse:
        """
        Generate access and refresh tokens carrying the user's tenant.

        Both token IDs are whitelisted for the token's lifetime; a token
        is only accepted while its ID stays on the whitelist.
        """
        access_token = create_access_token(subject=user.id, tenant_id=user.tenant_id)
        refresh_token = create_refresh_token(subject=user.id, tenant_id=user.tenant_id)

        for token in (access_token, refresh_token):
            payload = decode_token(token)
            await whitelist_token(payload["jti"], remaining_ttl(payload))

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=settings.access_token_expire_minutes * 60,
        )

    @staticmethod
    async def login(db: AsyncSession, identifier: str, password: str) -> LoginResponse:
        """Authenticate, cache the user's data and issue tokens."""
        user = await AuthService.authenticate_user(db, identifier, password)

        data = await AuthService.load_user_data(db, user)
        await set_cached_user(user.id, data)

        tokens = await AuthService.generate_tokens(user)
        return LoginResponse(**tokens.model_dump(), user=UserRead.model_validate(user))

    @staticmethod
    async def validate_token(token: str, token_type: str) -> dict[str, Any]:
        """
        Decode a token, check its type and that its ID is still whitelisted.

        Raises:
            AuthenticationError: Invalid, expired, wrong type or revoked token
        """
        try:
            payload = decode_token(token)
        except JWTError:
            raise AuthenticationError("Invalid or expired token")

        if payload.get("type") != token_type:
            raise AuthenticationError(f"Invalid token type. Use {token_type} token.")

        token_id = payload.get("jti")
        if not token_id or not await is_token_valid(token_id):
            logger.warning("token_rejected", token_type=token_type, sub=payload.get("sub"))
            raise AuthenticationError("Token has been revoked or is not valid")

        return payload

    @staticmethod
    async def refresh_access_token(
        db: AsyncSession,
        refresh_token: str,
    ) -> TokenResponse:
        """
        Generate a new token pair from a refresh token.

        The refresh token is single use: it is revoked once exchanged.

        Raises:
            AuthenticationError: If the token is invalid or the user is gone
        """
        payload = await AuthService.validate_token(refresh_token, REFRESH_TOKEN)

        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token payload")

        user = await db.get(User, user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive")

        await revoke_token(payload["jti"], remaining_ttl(payload))
        return await AuthService.generate_tokens(user)

    @staticmethod
    async def access_payload(token: str) -> dict[str, Any]:
        """Validate an access token and return its claims."""
        return await AuthService.validate_token(token, ACCESS_TOKEN)

    @staticmethod
    async def revoke(token: str) -> None:
        """Blacklist a token for the rest of its lifetime. Undecodable tokens are ignored."""
        try:
            payload = decode_token(token)
        except JWTError:
            return
        if payload.get("jti"):
            await revoke_token(payload["jti"], remaining_ttl(payload))


# Singleton instance
auth_service = AuthService()
