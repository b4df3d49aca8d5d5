"""
Tenant model for multi-tenancy.

Each tenant is an isolation boundary; most entities carry its ID.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.models.base import BaseModel


class TenantStatus(str, Enum):
    """Tenant lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


class Tenant(BaseModel):
    """
    Tenant (organization) model.

    Not tenant-scoped itself and carries no mutation hooks.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Tenant name"
    )

    slug: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-friendly tenant identifier"
    )

    domain: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        comment="Custom domain for the tenant"
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Tenant description"
    )

    status: Mapped[TenantStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TenantStatus.PENDING,
        index=True,
        comment="Tenant status"
    )

    settings: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Tenant-specific configuration settings"
    )

    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
        comment="Additional tenant metadata"
    )

    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Expiration date for trial/temporary tenants"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
        comment="Whether the tenant is currently active"
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, slug={self.slug})>"
