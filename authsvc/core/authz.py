"""
Authorization context and role/permission checks.

AuthContext is passed explicitly to every mutation and query. It carries
the acting user, the resolved tenant, the user's role names and permission
grants, and an optional bypass status used by seeding and internal calls.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

# Permission grant flags (columns of RolePermission)
CAN_READ = "can_read"
CAN_CREATE = "can_create"
CAN_UPDATE = "can_update"
CAN_DELETE = "can_delete"

ACTIONS = (CAN_READ, CAN_CREATE, CAN_UPDATE, CAN_DELETE)

ADMIN_ROLE = "admin"


class BypassStatus(str, Enum):
    """Explicit privacy override carried by the context."""
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True, slots=True)
class PermissionGrant:
    """One permission as granted to a role, with its CRUD flags."""

    name: str
    resource: str
    can_read: bool = False
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False

    def allows(self, action: str) -> bool:
        if action not in ACTIONS:
            raise ValueError(f"Unknown permission action: {action}")
        return getattr(self, action)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "resource": self.resource,
            CAN_READ: self.can_read,
            CAN_CREATE: self.can_create,
            CAN_UPDATE: self.can_update,
            CAN_DELETE: self.can_delete,
        }


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Invocation context for mutations and queries."""

    user_id: int | None = None
    tenant_id: int | None = None
    username: str | None = None
    roles: tuple[str, ...] = ()
    permissions: tuple[PermissionGrant, ...] = field(default_factory=tuple)
    bypass: BypassStatus | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def system(cls, tenant_id: int | None = None) -> "AuthContext":
        """Context for seeding and internal lookups; privacy is bypassed."""
        return cls(tenant_id=tenant_id, bypass=BypassStatus.ALLOW)


def check_bypass(ctx: AuthContext) -> BypassStatus | None:
    """Return the explicit bypass status, or None when rules should run."""
    return ctx.bypass


def has_any_role(ctx: AuthContext, roles: Iterable[str]) -> bool:
    wanted = set(roles)
    return any(role in wanted for role in ctx.roles)


def has_permission(ctx: AuthContext, resource: str, action: str) -> bool:
    """
    Check whether any grant on `resource` enables `action`.

    Args:
        resource: Resource name as stored on Permission.resource (e.g. "roles")
        action: One of can_read, can_create, can_update, can_delete
    """
    return any(
        grant.resource == resource and grant.allows(action)
        for grant in ctx.permissions
    )
