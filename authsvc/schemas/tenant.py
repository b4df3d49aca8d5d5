"""
Pydantic schemas for Tenant.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field

from authsvc.models.tenant import TenantStatus
from authsvc.schemas.common import AuditRead, BaseSchema, UpdateSchema

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

# The ORM attribute is `meta`; the API field is `metadata`
_META_FIELD = dict(
    validation_alias=AliasChoices("meta", "metadata"),
    serialization_alias="metadata",
)


class TenantCreate(BaseSchema):
    """Schema for creating a new tenant."""

    name: str = Field(..., min_length=1, max_length=100, description="Organization name")
    slug: str = Field(..., min_length=1, max_length=50, pattern=SLUG_PATTERN)
    domain: str | None = Field(None, max_length=255)
    description: str | None = None
    status: TenantStatus = TenantStatus.PENDING
    settings: dict[str, Any] | None = None
    meta: dict[str, Any] | None = Field(None, **_META_FIELD)
    expires_at: datetime | None = None
    is_active: bool = True


class TenantUpdate(UpdateSchema):
    """Schema for updating a tenant (all fields optional)."""

    non_nullable = ("name", "status", "is_active")

    name: str | None = Field(None, min_length=1, max_length=100)
    domain: str | None = Field(None, max_length=255)
    description: str | None = None
    status: TenantStatus | None = None
    settings: dict[str, Any] | None = None
    meta: dict[str, Any] | None = Field(None, **_META_FIELD)
    expires_at: datetime | None = None
    is_active: bool | None = None


class TenantRead(AuditRead):
    """Schema for reading tenant data."""

    name: str
    slug: str
    domain: str | None = None
    description: str | None = None
    status: TenantStatus
    settings: dict[str, Any] | None = None
    meta: dict[str, Any] | None = Field(None, **_META_FIELD)
    expires_at: datetime | None = None
    is_active: bool
