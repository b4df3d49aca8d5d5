"""
Role-Based Access Control (RBAC) models.

A user has at most one role; a role is granted permissions through
RolePermission rows that carry per-action flags.
"""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authsvc.models.base import BaseModel
from authsvc.models.mixins import CodeMixin, TenantMixin


class Permission(BaseModel):
    """
    Permission model. Global, not tenant-scoped.

    Examples:
    - users.manage (resource "users")
    - roles.manage (resource "roles")
    """

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        comment="Permission name (e.g., users.manage)"
    )

    display_name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        comment="Human-readable permission name"
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    resource: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Resource this permission applies to (e.g., users, roles)"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    role_permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="permission",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Permission(name={self.name})>"


class Role(CodeMixin, TenantMixin, BaseModel):
    """
    Role model for grouping permissions.

    The code is generated from tenant_id and name when the role is created.
    """

    __tablename__ = "roles"
    __immutable_fields__ = frozenset({"code"})

    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        comment="Role name (e.g., admin, user, moderator)"
    )

    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Human-readable role name"
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    priority: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="Role priority for hierarchy (higher number = higher priority)"
    )

    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="role",
        passive_deletes=True,
    )

    role_permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_role_tenant_code"),
    )

    def __repr__(self) -> str:
        return f"<Role(name={self.name}, tenant_id={self.tenant_id})>"


class RolePermission(TenantMixin, BaseModel):
    """Grant of one permission to one role with CRUD flags."""

    __tablename__ = "role_permissions"

    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    permission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    can_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_create: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_update: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    role: Mapped["Role"] = relationship("Role", back_populates="role_permissions")
    permission: Mapped["Permission"] = relationship(
        "Permission",
        back_populates="role_permissions",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
        Index("idx_role_permission_tenant_role", "tenant_id", "role_id"),
    )

    def __repr__(self) -> str:
        return f"<RolePermission(role_id={self.role_id}, permission_id={self.permission_id})>"
