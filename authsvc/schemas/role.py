"""
Pydantic schemas for Role, Permission and RolePermission.
"""

from pydantic import Field

from authsvc.schemas.common import AuditRead, BaseSchema, UpdateSchema


# Role

class RoleCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    priority: int = 0
    is_active: bool = True


class RoleUpdate(UpdateSchema):
    """Code is fixed at creation and cannot be updated."""

    non_nullable = ("name", "display_name", "priority", "is_active")

    name: str | None = Field(None, min_length=1, max_length=50)
    display_name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    priority: int | None = None
    is_active: bool | None = None


class RoleRead(AuditRead):
    tenant_id: int
    name: str
    display_name: str
    description: str | None = None
    code: str | None = None
    priority: int
    is_active: bool


# Permission

class PermissionCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100, description="e.g. users.manage")
    display_name: str = Field(..., min_length=1, max_length=150)
    description: str | None = Field(None, max_length=500)
    resource: str = Field(..., min_length=1, max_length=50)
    is_active: bool = True


class PermissionUpdate(UpdateSchema):
    non_nullable = ("display_name", "resource", "is_active")

    display_name: str | None = Field(None, min_length=1, max_length=150)
    description: str | None = Field(None, max_length=500)
    resource: str | None = Field(None, min_length=1, max_length=50)
    is_active: bool | None = None


class PermissionRead(AuditRead):
    name: str
    display_name: str
    description: str | None = None
    resource: str
    is_active: bool


# RolePermission

class RolePermissionCreate(BaseSchema):
    role_id: int
    permission_id: int
    can_read: bool = False
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False


class RolePermissionUpdate(UpdateSchema):
    non_nullable = ("can_read", "can_create", "can_update", "can_delete")

    can_read: bool | None = None
    can_create: bool | None = None
    can_update: bool | None = None
    can_delete: bool | None = None


class RolePermissionRead(AuditRead):
    tenant_id: int
    role_id: int
    permission_id: int
    can_read: bool
    can_create: bool
    can_update: bool
    can_delete: bool
