"""
Seed the default tenant, the admin role with its permissions, and an admin user.

Idempotent: existing rows (matched by slug, role name, permission name,
role/permission pair and email) are reused. Privacy rules are bypassed.

Usage:
    python -m scripts.seed
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from authsvc.config import settings
from authsvc.core.authz import AuthContext
from authsvc.core.database import Base, db_manager
from authsvc.core.logging_config import setup_logging
from authsvc.core.security import hash_password
from authsvc.models import Permission, Role, RolePermission, Tenant, TenantStatus, User
from authsvc.mutations.client import Clients, clients

logger = structlog.get_logger(__name__)

ADMIN_ROLE = {
    "name": "admin",
    "display_name": "Administrator",
    "description": "Full system access with all permissions",
    "is_active": True,
    "priority": 100,
}

PERMISSIONS = [
    ("users.manage", "Manage Users", "Full access to create, read, update, and delete users", "users"),
    ("roles.manage", "Manage Roles", "Full access to create, read, update, and delete roles", "roles"),
    ("permissions.manage", "Manage Permissions", "Full access to create, read, update, and delete permissions", "permissions"),
    ("system.configure", "Configure System", "Access to system configuration and settings", "system"),
    ("audit.view", "View Audit Logs", "Access to view system audit logs and reports", "audit"),
]


@dataclass
class SeedResult:
    tenant: Tenant
    role: Role
    permissions: list[Permission]
    user: User


async def _first(client, ctx: AuthContext, *where):
    rows = await client.list(ctx, *where, limit=1)
    return rows[0] if rows else None


async def _ensure_tenant(db_clients: Clients) -> Tenant:
    ctx = AuthContext.system()
    tenant = await _first(db_clients.tenant, ctx, Tenant.slug == settings.seed_tenant_slug)
    if tenant is not None:
        logger.info("seed_tenant_exists", tenant_id=tenant.id, slug=tenant.slug)
        return tenant

    tenant = await db_clients.tenant.create(
        ctx,
        name=settings.seed_tenant_name,
        slug=settings.seed_tenant_slug,
        status=TenantStatus.ACTIVE,
        is_active=True,
    )
    logger.info("seed_tenant_created", tenant_id=tenant.id, slug=tenant.slug)
    return tenant


async def _ensure_admin_role(db_clients: Clients, ctx: AuthContext) -> Role:
    role = await _first(db_clients.role, ctx, Role.name == ADMIN_ROLE["name"])
    if role is not None:
        logger.info("seed_role_exists", role_id=role.id)
        return role

    role = await db_clients.role.create(ctx, **ADMIN_ROLE)
    logger.info("seed_role_created", role_id=role.id, code=role.code)
    return role


async def _ensure_permissions(db_clients: Clients, ctx: AuthContext) -> list[Permission]:
    permissions = []
    for name, display_name, description, resource in PERMISSIONS:
        permission = await _first(db_clients.permission, ctx, Permission.name == name)
        if permission is None:
            permission = await db_clients.permission.create(
                ctx,
                name=name,
                display_name=display_name,
                description=description,
                resource=resource,
                is_active=True,
            )
            logger.info("seed_permission_created", permission=name)
        permissions.append(permission)
    return permissions


async def _ensure_grants(
    db_clients: Clients,
    ctx: AuthContext,
    role: Role,
    permissions: list[Permission],
) -> None:
    for permission in permissions:
        grant = await _first(
            db_clients.role_permission,
            ctx,
            RolePermission.role_id == role.id,
            RolePermission.permission_id == permission.id,
        )
        if grant is not None:
            continue
        await db_clients.role_permission.create(
            ctx,
            role_id=role.id,
            permission_id=permission.id,
            can_read=True,
            can_create=True,
            can_update=True,
            can_delete=True,
        )
        logger.info("seed_grant_created", role=role.name, permission=permission.name)


async def _ensure_admin_user(db_clients: Clients, ctx: AuthContext, role: Role) -> User:
    user = await _first(db_clients.user, ctx, User.email == settings.seed_admin_email)
    if user is not None:
        logger.info("seed_user_exists", user_id=user.id)
        return user

    user = await db_clients.user.create(
        ctx,
        email=settings.seed_admin_email,
        username=settings.seed_admin_username,
        password_hash=hash_password(settings.seed_admin_password),
        name="System Administrator",
        user_type="admin",
        is_active=True,
        email_verified=True,
        email_verified_at=datetime.now(timezone.utc),
        role_id=role.id,
    )
    logger.info("seed_user_created", user_id=user.id, email=user.email)
    return user


async def seed_database(db: AsyncSession) -> SeedResult:
    """Create (or reuse) the seed rows inside the given session."""
    db_clients = clients(db)

    tenant = await _ensure_tenant(db_clients)
    ctx = AuthContext.system(tenant_id=tenant.id)

    role = await _ensure_admin_role(db_clients, ctx)
    permissions = await _ensure_permissions(db_clients, ctx)
    await _ensure_grants(db_clients, ctx, role, permissions)
    user = await _ensure_admin_user(db_clients, ctx, role)

    return SeedResult(tenant=tenant, role=role, permissions=permissions, user=user)


async def main() -> None:
    setup_logging()
    db_manager.init()

    async with db_manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async for db in db_manager.get_session():
            result = await seed_database(db)
    finally:
        await db_manager.close()

    print("Seed complete")
    print(f"  Tenant:   {result.tenant.slug} (id={result.tenant.id})")
    print(f"  Role:     {result.role.name} (code={result.role.code})")
    print(f"  User:     {result.user.email} / {settings.seed_admin_username}")
    for permission in result.permissions:
        print(f"  Granted:  {permission.name} ({permission.resource})")


if __name__ == "__main__":
    asyncio.run(main())
