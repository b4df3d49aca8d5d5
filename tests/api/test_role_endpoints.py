"""
API tests for roles, permissions and role-permission grants.
"""

import pytest
from httpx import AsyncClient

from tests.factories import PermissionFactory, RoleFactory, RolePermissionFactory


@pytest.mark.api
class TestRoleEndpoints:
    async def test_create_role_generates_code(self, admin_client: AsyncClient, test_tenant):
        response = await admin_client.post(
            "/api/v1/roles/",
            json={"name": "Content Editor", "display_name": "Content Editor"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["tenant_id"] == test_tenant.id
        assert data["code"] == f"tenant:{test_tenant.id}:code:content_editor"

    async def test_create_role_without_grant_forbidden(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/roles/",
            json={"name": "Sneaky", "display_name": "Sneaky"},
        )

        assert response.status_code == 403

    async def test_rename_keeps_code(self, admin_client: AsyncClient, db_session, test_tenant):
        role = await RoleFactory.create(db_session, test_tenant, name="support")

        response = await admin_client.patch(
            f"/api/v1/roles/{role.id}",
            json={"name": "helpdesk", "display_name": "Helpdesk"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "helpdesk"
        assert data["code"] == f"tenant:{test_tenant.id}:code:support"

    async def test_update_role_invalidates_user_cache(
        self, admin_client: AsyncClient, db_session, test_tenant, mock_cache
    ):
        role = await RoleFactory.create(db_session, test_tenant, name="ops")
        await admin_client.get("/api/v1/auth/me")
        assert mock_cache

        await admin_client.patch(f"/api/v1/roles/{role.id}", json={"priority": 5})

        assert not any(key.startswith("auth:") for key in mock_cache)

    async def test_user_cache_invalidated_after_commit(
        self, admin_client: AsyncClient, db_session, test_tenant, monkeypatch
    ):
        role = await RoleFactory.create(db_session, test_tenant, name="ops")
        in_transaction = []

        async def record_invalidation():
            in_transaction.append(db_session.in_transaction())
            return 0

        monkeypatch.setattr(
            "authsvc.features.roles.router.invalidate_user_cache", record_invalidation
        )

        response = await admin_client.patch(f"/api/v1/roles/{role.id}", json={"priority": 5})

        assert response.status_code == 200
        assert in_transaction == [False]

    async def test_role_permissions(self, admin_client: AsyncClient, admin_role):
        response = await admin_client.get(f"/api/v1/roles/{admin_role.id}/permissions")

        assert response.status_code == 200
        grants = response.json()
        assert len(grants) == 2
        assert all(g["role_id"] == admin_role.id for g in grants)

    async def test_get_missing_role(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/v1/roles/9999")

        assert response.status_code == 404

    async def test_delete_role(self, admin_client: AsyncClient, db_session, test_tenant):
        role = await RoleFactory.create(db_session, test_tenant, name="short-lived")

        response = await admin_client.delete(f"/api/v1/roles/{role.id}")

        assert response.status_code == 204


@pytest.mark.api
class TestPermissionEndpoints:
    async def test_any_user_can_read(self, authenticated_client: AsyncClient, users_permission):
        response = await authenticated_client.get("/api/v1/permissions/")

        assert response.status_code == 200
        assert response.json()["total"] == 1

    async def test_filter_by_resource(
        self, admin_client: AsyncClient, users_permission, roles_permission
    ):
        response = await admin_client.get("/api/v1/permissions/", params={"resource": "roles"})

        assert [p["name"] for p in response.json()["items"]] == ["roles.manage"]

    async def test_create_requires_admin(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/v1/permissions/",
            json={"name": "audit.view", "display_name": "View Audit", "resource": "audit"},
        )

        assert response.status_code == 403

    async def test_admin_creates_permission(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/v1/permissions/",
            json={"name": "audit.view", "display_name": "View Audit", "resource": "audit"},
        )

        assert response.status_code == 201
        assert response.json()["resource"] == "audit"


@pytest.mark.api
class TestRolePermissionEndpoints:
    async def test_grant_permission(self, admin_client: AsyncClient, db_session, test_tenant):
        role = await RoleFactory.create(db_session, test_tenant, name="reporter")
        permission = await PermissionFactory.create(db_session, resource="reports")

        response = await admin_client.post(
            "/api/v1/role-permissions/",
            json={"role_id": role.id, "permission_id": permission.id, "can_read": True},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["tenant_id"] == test_tenant.id
        assert data["can_read"] is True
        assert data["can_update"] is False

    async def test_duplicate_grant_conflicts(
        self, admin_client: AsyncClient, admin_role, users_permission, test_admin
    ):
        response = await admin_client.post(
            "/api/v1/role-permissions/",
            json={"role_id": admin_role.id, "permission_id": users_permission.id},
        )

        assert response.status_code == 409

    async def test_list_filtered_by_role(self, admin_client: AsyncClient, admin_role):
        response = await admin_client.get(
            "/api/v1/role-permissions/", params={"role_id": admin_role.id}
        )

        assert response.status_code == 200
        assert response.json()["total"] == 2

    async def test_other_tenant_grant_hidden(
        self, admin_client: AsyncClient, db_session, other_tenant
    ):
        role = await RoleFactory.create(db_session, other_tenant, name="foreign")
        permission = await PermissionFactory.create(db_session, resource="billing")
        grant = await RolePermissionFactory.create(db_session, role, permission)

        get_response = await admin_client.get(f"/api/v1/role-permissions/{grant.id}")
        patch_response = await admin_client.patch(
            f"/api/v1/role-permissions/{grant.id}", json={"can_read": True}
        )

        assert get_response.status_code == 404
        assert patch_response.status_code == 403

    async def test_update_grant(self, admin_client: AsyncClient, db_session, test_tenant):
        role = await RoleFactory.create(db_session, test_tenant, name="viewer")
        permission = await PermissionFactory.create(db_session, resource="dashboards")
        grant = await RolePermissionFactory.create(db_session, role, permission)

        response = await admin_client.patch(
            f"/api/v1/role-permissions/{grant.id}", json={"can_read": True}
        )

        assert response.status_code == 200
        assert response.json()["can_read"] is True

    async def test_grant_flag_cannot_be_null(
        self, admin_client: AsyncClient, db_session, test_tenant
    ):
        role = await RoleFactory.create(db_session, test_tenant, name="viewer")
        permission = await PermissionFactory.create(db_session, resource="dashboards")
        grant = await RolePermissionFactory.create(db_session, role, permission)

        response = await admin_client.patch(
            f"/api/v1/role-permissions/{grant.id}", json={"can_read": None}
        )

        assert response.status_code == 422
