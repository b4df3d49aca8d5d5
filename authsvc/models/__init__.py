"""
Database models package.
"""

from authsvc.core.database import Base
from authsvc.models.base import BaseModel
from authsvc.models.tenant import Tenant, TenantStatus
from authsvc.models.user import User
from authsvc.models.role import Permission, Role, RolePermission
from authsvc.models.brand import Brand

__all__ = [
    "Base",
    "BaseModel",
    "Tenant",
    "TenantStatus",
    "User",
    "Permission",
    "Role",
    "RolePermission",
    "Brand",
]
