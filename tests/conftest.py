"""
Pytest fixtures for all tests.

Provides:
- In-memory SQLite database (aiosqlite), fresh per test
- Test application and HTTP clients (admin and plain member)
- In-memory replacement for the Redis cache
- Seeded tenant, admin role with grants, and users
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from authsvc.core.authz import ADMIN_ROLE, AuthContext, PermissionGrant
from authsvc.core.database import Base, get_db
from authsvc.features.auth.service import auth_service
from authsvc.main import create_application
from authsvc.models import Permission, Role, Tenant, User
from tests.factories import (
    PermissionFactory,
    RoleFactory,
    RolePermissionFactory,
    TenantFactory,
    UserFactory,
)

# Single shared connection so every session sees the same in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_db_engine():
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session for a test."""
    session_factory = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_cache(monkeypatch):
    """
    Mock Redis cache with in-memory dictionary.

    This allows cache testing without running Redis.
    """
    cache_dict = {}

    class MockCacheManager:
        async def get(self, namespace, key):
            return cache_dict.get(f"{namespace}:{key}")

        async def set(self, namespace, key, value, ttl=None):
            cache_dict[f"{namespace}:{key}"] = value
            return True

        async def delete(self, namespace, key):
            return cache_dict.pop(f"{namespace}:{key}", None) is not None

        async def invalidate_namespace(self, namespace):
            keys_to_delete = [k for k in cache_dict if k.startswith(f"{namespace}:")]
            for key in keys_to_delete:
                del cache_dict[key]
            return len(keys_to_delete)

    from authsvc.core import cache
    monkeypatch.setattr(cache, "cache_manager", MockCacheManager())

    return cache_dict


@pytest_asyncio.fixture
async def app(db_session: AsyncSession, mock_cache):
    """
    Create FastAPI test application.

    Overrides the database dependency to use the test session.
    """
    application = create_application()

    async def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db

    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/health/live")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Test data
@pytest_asyncio.fixture
async def test_tenant(db_session: AsyncSession) -> Tenant:
    return await TenantFactory.create(db_session, name="Test Corporation", slug="test-corp")


@pytest_asyncio.fixture
async def other_tenant(db_session: AsyncSession) -> Tenant:
    return await TenantFactory.create(db_session, name="Other Corporation", slug="other-corp")


@pytest_asyncio.fixture
async def admin_role(db_session: AsyncSession, test_tenant: Tenant) -> Role:
    return await RoleFactory.create(
        db_session,
        test_tenant,
        name=ADMIN_ROLE,
        display_name="Administrator",
        priority=100,
    )


@pytest_asyncio.fixture
async def users_permission(db_session: AsyncSession) -> Permission:
    return await PermissionFactory.create(db_session, name="users.manage", resource="users")


@pytest_asyncio.fixture
async def roles_permission(db_session: AsyncSession) -> Permission:
    return await PermissionFactory.create(db_session, name="roles.manage", resource="roles")


@pytest_asyncio.fixture
async def test_admin(
    db_session: AsyncSession,
    test_tenant: Tenant,
    admin_role: Role,
    users_permission: Permission,
    roles_permission: Permission,
) -> User:
    """Admin user with full grants on users and roles."""
    for permission in (users_permission, roles_permission):
        await RolePermissionFactory.create(
            db_session,
            admin_role,
            permission,
            can_read=True,
            can_create=True,
            can_update=True,
            can_delete=True,
        )
    return await UserFactory.create(
        db_session,
        test_tenant,
        email="admin@example.com",
        username="admin",
        password="admin123",
        user_type="admin",
        role_id=admin_role.id,
    )


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, test_tenant: Tenant) -> User:
    """User without a role."""
    return await UserFactory.create(
        db_session,
        test_tenant,
        email="member@example.com",
        username="member",
        password="member123",
    )


@pytest.fixture
def admin_context(test_admin: User) -> AuthContext:
    return AuthContext(
        user_id=test_admin.id,
        tenant_id=test_admin.tenant_id,
        username=test_admin.username,
        roles=(ADMIN_ROLE,),
        permissions=(
            PermissionGrant("users.manage", "users", True, True, True, True),
            PermissionGrant("roles.manage", "roles", True, True, True, True),
        ),
    )


@pytest.fixture
def user_context(test_user: User) -> AuthContext:
    return AuthContext(
        user_id=test_user.id,
        tenant_id=test_user.tenant_id,
        username=test_user.username,
    )


@pytest_asyncio.fixture
async def admin_token(test_admin: User, mock_cache) -> str:
    """Whitelisted access token for the admin."""
    return (await auth_service.generate_tokens(test_admin)).access_token


@pytest_asyncio.fixture
async def user_token(test_user: User, mock_cache) -> str:
    return (await auth_service.generate_tokens(test_user)).access_token


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_token: str) -> AsyncClient:
    """HTTP client authenticated as the tenant admin."""
    client.headers.update({"Authorization": f"Bearer {admin_token}"})
    return client


@pytest_asyncio.fixture
async def authenticated_client(client: AsyncClient, user_token: str) -> AsyncClient:
    """HTTP client authenticated as a user without role or grants."""
    client.headers.update({"Authorization": f"Bearer {user_token}"})
    return client
