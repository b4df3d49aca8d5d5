"""
User model for authentication and authorization.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authsvc.models.base import BaseModel
from authsvc.models.mixins import TenantMixin


class User(TenantMixin, BaseModel):
    """User account model. Email and username are unique across all tenants."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Bcrypt hashed password"
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    user_type: Mapped[str] = mapped_column(
        String(50),
        default="staff",
        nullable=False,
        comment="Type of user - admin, staff, vendor, or customer"
    )

    # Business-specific fields (used based on user_type)
    user_code: Mapped[str | None] = mapped_column(
        String(20),
        unique=True,
        nullable=True,
        comment="Vendor code or Customer code"
    )
    company_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
        comment="For vendors and corporate customers"
    )
    customer_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="For customers only - individual or corporate"
    )
    payment_terms: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="For vendors only - payment days"
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    role_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    role: Mapped["Role | None"] = relationship("Role", back_populates="users")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
