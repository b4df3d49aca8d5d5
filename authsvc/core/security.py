"""
Security utilities for authentication.

Provides:
- Password hashing and verification (bcrypt)
- JWT token generation and validation
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext

from authsvc.config import settings

logger = structlog.get_logger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Returns False (instead of raising) when the stored value is not a
    recognizable hash.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def is_password_hashed(value: str) -> bool:
    """bcrypt hashes start with "$2"; anything else is a plaintext password."""
    return value.startswith("$2")


def _create_token(
    token_type: str,
    subject: int | str,
    tenant_id: int | None,
    expires_delta: timedelta,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode.update({
        "sub": str(subject),
        "tenant_id": tenant_id,
        "type": token_type,
        "jti": secrets.token_hex(16),
        "iat": now,
        "exp": now + expires_delta,
    })

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def create_access_token(
    subject: int | str,
    tenant_id: int | None = None,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: User ID
        tenant_id: Tenant the user belongs to
        expires_delta: Token expiration time (default: from settings)
        extra_claims: Additional claims merged into the payload

    Returns:
        Encoded JWT token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _create_token(ACCESS_TOKEN, subject, tenant_id, expires_delta, extra_claims)


def create_refresh_token(
    subject: int | str,
    tenant_id: int | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT refresh token."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _create_token(REFRESH_TOKEN, subject, tenant_id, expires_delta)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError as e:
        logger.warning("jwt_decode_failed", error=str(e))
        raise


def remaining_ttl(payload: dict[str, Any]) -> int:
    """Seconds until the token's "exp" claim; 0 once expired."""
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    return max(0, int((expires_at - datetime.now(timezone.utc)).total_seconds()))
