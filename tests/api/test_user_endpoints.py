"""
API tests for user management endpoints.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from authsvc.features.auth.service import auth_service
from tests.factories import RoleFactory, RolePermissionFactory, UserFactory


@pytest_asyncio.fixture
async def editor(db_session, test_tenant, users_permission):
    """User whose role may read and update users, but is not admin."""
    role = await RoleFactory.create(db_session, test_tenant, name="editor")
    await RolePermissionFactory.create(
        db_session, role, users_permission, can_read=True, can_update=True
    )
    return await UserFactory.create(db_session, test_tenant, role_id=role.id)


@pytest_asyncio.fixture
async def editor_client(client: AsyncClient, editor, mock_cache) -> AsyncClient:
    tokens = await auth_service.generate_tokens(editor)
    client.headers.update({"Authorization": f"Bearer {tokens.access_token}"})
    return client


@pytest.mark.api
class TestUserEndpoints:
    async def test_create_user(self, admin_client: AsyncClient, test_tenant):
        response = await admin_client.post(
            "/api/v1/users/",
            json={
                "email": "new@example.com",
                "username": "newbie",
                "password": "Newbie123",
                "name": "New User",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["tenant_id"] == test_tenant.id
        assert data["user_type"] == "staff"
        assert "password" not in data
        assert "password_hash" not in data

    async def test_create_user_weak_password(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/v1/users/",
            json={
                "email": "weak@example.com",
                "username": "weakling",
                "password": "password",
                "name": "Weak",
            },
        )

        assert response.status_code == 422

    async def test_create_user_without_grant_forbidden(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/users/",
            json={
                "email": "nope@example.com",
                "username": "nope",
                "password": "Nope12345",
                "name": "Nope",
            },
        )

        assert response.status_code == 403
        assert response.json()["error"] == "PrivacyDenied"

    async def test_duplicate_email_conflicts(self, admin_client: AsyncClient, test_user):
        response = await admin_client.post(
            "/api/v1/users/",
            json={
                "email": "member@example.com",
                "username": "another",
                "password": "Another123",
                "name": "Another",
            },
        )

        assert response.status_code == 409

    async def test_list_users_only_own_tenant(
        self, admin_client: AsyncClient, db_session, test_user, other_tenant
    ):
        await UserFactory.create(db_session, other_tenant, email="outsider@example.com")

        response = await admin_client.get("/api/v1/users/")

        assert response.status_code == 200
        data = response.json()
        emails = {u["email"] for u in data["items"]}
        assert emails == {"admin@example.com", "member@example.com"}
        assert data["total"] == 2

    async def test_list_users_filter_inactive(
        self, admin_client: AsyncClient, db_session, test_tenant
    ):
        await UserFactory.create(db_session, test_tenant, email="gone@example.com", is_active=False)

        response = await admin_client.get("/api/v1/users/", params={"is_active": False})

        assert [u["email"] for u in response.json()["items"]] == ["gone@example.com"]

    async def test_list_users_without_grant_forbidden(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/v1/users/")

        assert response.status_code == 403

    async def test_get_user_in_other_tenant(
        self, admin_client: AsyncClient, db_session, other_tenant
    ):
        stranger = await UserFactory.create(db_session, other_tenant)

        response = await admin_client.get(f"/api/v1/users/{stranger.id}")

        assert response.status_code == 404

    async def test_update_user_rehashes_password(
        self, admin_client: AsyncClient, client: AsyncClient, test_user
    ):
        response = await admin_client.patch(
            f"/api/v1/users/{test_user.id}",
            json={"password": "Changed123", "name": "Renamed"},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

        login = await client.post(
            "/api/v1/auth/login/json",
            json={"identifier": "member", "password": "Changed123"},
        )
        assert login.status_code == 200

    async def test_delete_user(self, admin_client: AsyncClient, test_user):
        response = await admin_client.delete(f"/api/v1/users/{test_user.id}")
        assert response.status_code == 204

        response = await admin_client.get(f"/api/v1/users/{test_user.id}")
        assert response.status_code == 404

    async def test_cannot_delete_self(self, admin_client: AsyncClient, test_admin):
        response = await admin_client.delete(f"/api/v1/users/{test_admin.id}")

        assert response.status_code == 400

    async def test_null_name_rejected(self, admin_client: AsyncClient, test_user):
        response = await admin_client.patch(f"/api/v1/users/{test_user.id}", json={"name": None})

        assert response.status_code == 422

    async def test_cache_invalidated_after_commit(
        self, admin_client: AsyncClient, db_session, test_user, monkeypatch
    ):
        in_transaction = []

        async def record_invalidation(user_id):
            in_transaction.append(db_session.in_transaction())
            return True

        monkeypatch.setattr(
            "authsvc.features.users.router.invalidate_cached_user", record_invalidation
        )

        response = await admin_client.patch(
            f"/api/v1/users/{test_user.id}", json={"name": "Renamed"}
        )

        assert response.status_code == 200
        assert in_transaction == [False]


@pytest.mark.api
class TestRoleAssignment:
    async def test_admin_assigns_role(
        self, admin_client: AsyncClient, test_user, admin_role
    ):
        response = await admin_client.patch(
            f"/api/v1/users/{test_user.id}", json={"role_id": admin_role.id}
        )

        assert response.status_code == 200
        assert response.json()["role_id"] == admin_role.id

    async def test_non_admin_cannot_change_own_role(
        self, editor_client: AsyncClient, editor, admin_role
    ):
        response = await editor_client.patch(
            f"/api/v1/users/{editor.id}", json={"role_id": admin_role.id}
        )

        assert response.status_code == 403

    async def test_non_admin_updates_other_fields(self, editor_client: AsyncClient, editor):
        response = await editor_client.patch(
            f"/api/v1/users/{editor.id}", json={"name": "Still An Editor"}
        )

        assert response.status_code == 200
        assert response.json()["role_id"] == editor.role_id
