"""
Pydantic schemas package.
"""

from authsvc.schemas.common import (
    AuditRead,
    BaseSchema,
    ErrorResponse,
    IdsRequest,
    MessageResponse,
    PaginatedResponse,
    UpdateSchema,
)
from authsvc.schemas.brand import BrandCreate, BrandRead, BrandUpdate
from authsvc.schemas.role import (
    PermissionCreate,
    PermissionRead,
    PermissionUpdate,
    RoleCreate,
    RolePermissionCreate,
    RolePermissionRead,
    RolePermissionUpdate,
    RoleRead,
    RoleUpdate,
)
from authsvc.schemas.tenant import TenantCreate, TenantRead, TenantUpdate
from authsvc.schemas.user import UserCreate, UserRead, UserUpdate

__all__ = [
    # Common
    "AuditRead",
    "BaseSchema",
    "ErrorResponse",
    "IdsRequest",
    "MessageResponse",
    "PaginatedResponse",
    "UpdateSchema",
    # Tenant
    "TenantCreate",
    "TenantRead",
    "TenantUpdate",
    # User
    "UserCreate",
    "UserRead",
    "UserUpdate",
    # RBAC
    "RoleCreate",
    "RoleRead",
    "RoleUpdate",
    "PermissionCreate",
    "PermissionRead",
    "PermissionUpdate",
    "RolePermissionCreate",
    "RolePermissionRead",
    "RolePermissionUpdate",
    # Brand
    "BrandCreate",
    "BrandRead",
    "BrandUpdate",
]
