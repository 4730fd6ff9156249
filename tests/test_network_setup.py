"""Tests for network setup and landlord/tenant administration"""

import pytest
from iam.models.tenant import Tenant
from iam.services.setup_service import DEFAULT_PERMISSIONS, DEFAULT_POLICIES, DEFAULT_ROLES, SetupService
from tests.conftest import headers_for, permission_by_key, role_by_code


class TestCreateNetwork:
    def test_super_admin_creates_network(self, client, super_admin):
        response = client.post(
            "/api/setup/networks",
            headers=headers_for(super_admin),
            json={"name": "Lotus Academy", "config": {"default_currency": "EUR"}, "first_tenant_name": "Lotus East"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["landlord"]["name"] == "Lotus Academy"
        assert data["primary_tenant"]["name"] == "Lotus Academy HQ"
        assert data["primary_tenant"]["config"]["is_primary_tenant"] is True
        assert data["primary_tenant"]["config"]["default_currency"] == "EUR"
        assert data["primary_tenant"]["config"]["timezone"] == "America/Sao_Paulo"
        assert data["first_tenant"]["name"] == "Lotus East"
        assert data["status"]["tenants_count"] == 2
        assert data["status"]["roles_count"] == len(DEFAULT_ROLES)
        assert data["status"]["permissions_count"] == len(DEFAULT_PERMISSIONS)
        assert data["status"]["policies_count"] == len(DEFAULT_POLICIES)

    def test_duplicate_network_is_conflict(self, client, super_admin, landlord):
        response = client.post(
            "/api/setup/networks", headers=headers_for(super_admin), json={"name": landlord.name}
        )
        assert response.status_code == 409

    def test_admin_cannot_create_network(self, client, admin):
        response = client.post("/api/setup/networks", headers=headers_for(admin), json={"name": "Rogue Net"})
        assert response.status_code == 403

    def test_status(self, client, super_admin, landlord):
        response = client.get(f"/api/setup/networks/{landlord.id}/status", headers=headers_for(super_admin))

        assert response.status_code == 200
        assert response.json()["has_roles"] is True
        assert response.json()["has_policies"] is True


class TestInstallDefaults:
    def test_is_idempotent(self, db_session, landlord):
        result = SetupService(db_session).install_defaults(landlord.id)

        assert result.policies_created == 0
        assert result.permissions_created == 0
        assert result.roles_created == 0
        assert result.attachments_created == 0
        assert db_session.query(Tenant).filter(Tenant.landlord_id == landlord.id).count() == 1

    def test_restores_missing_attachment(self, client, db_session, super_admin, landlord):
        role = role_by_code(db_session, landlord, "receptionist")
        permission = permission_by_key(db_session, landlord, "read", "classes")
        base = f"/api/landlords/{landlord.id}/roles/{role.id}/permissions"
        headers = headers_for(super_admin)
        assert client.delete(f"{base}/{permission.id}", headers=headers).json() == {"detached": True}

        response = client.post(f"/api/setup/networks/{landlord.id}/defaults", headers=headers)

        assert response.status_code == 200
        listed = client.get(base, headers=headers).json()
        assert any(a["permission_id"] == str(permission.id) for a in listed)


class TestLandlords:
    def test_list_and_create(self, client, super_admin, landlord):
        headers = headers_for(super_admin)

        created = client.post("/api/landlords", headers=headers, json={"name": "Empty Net"})
        assert created.status_code == 201

        names = {l["name"] for l in client.get("/api/landlords", headers=headers).json()}
        assert names == {"Iron Dojo Network", "Empty Net"}

    def test_delete_empty_landlord(self, client, super_admin):
        headers = headers_for(super_admin)
        created = client.post("/api/landlords", headers=headers, json={"name": "Empty Net"}).json()

        response = client.delete(f"/api/landlords/{created['id']}", headers=headers)

        assert response.status_code == 204

    def test_delete_landlord_with_dependents_is_conflict(self, client, super_admin, other_landlord):
        response = client.delete(f"/api/landlords/{other_landlord.id}", headers=headers_for(super_admin))

        assert response.status_code == 409
        assert "tenants" in response.json()["detail"]

    def test_admin_cannot_list_landlords(self, client, admin):
        response = client.get("/api/landlords", headers=headers_for(admin))
        assert response.status_code == 403


class TestTenants:
    def test_admin_adds_branch(self, client, admin, landlord):
        headers = headers_for(admin)

        response = client.post(
            f"/api/landlords/{landlord.id}/tenants", headers=headers, json={"name": "Iron Dojo North"}
        )
        assert response.status_code == 201

        names = [t["name"] for t in client.get(f"/api/landlords/{landlord.id}/tenants", headers=headers).json()]
        assert names == ["Iron Dojo Network HQ", "Iron Dojo North"]

    def test_admin_of_other_landlord_denied(self, client, admin, other_landlord):
        response = client.post(
            f"/api/landlords/{other_landlord.id}/tenants", headers=headers_for(admin), json={"name": "Hijack"}
        )
        assert response.status_code == 403

    def test_get_tenant(self, client, admin, landlord, primary_tenant):
        response = client.get(
            f"/api/landlords/{landlord.id}/tenants/{primary_tenant.id}", headers=headers_for(admin)
        )

        assert response.status_code == 200
        assert response.json()["config"]["is_primary_tenant"] is True

    def test_tenant_of_other_landlord_is_not_found(
        self, client, db_session, super_admin, landlord, other_landlord
    ):
        foreign = db_session.query(Tenant).filter(Tenant.landlord_id == other_landlord.id).first()

        response = client.get(
            f"/api/landlords/{landlord.id}/tenants/{foreign.id}", headers=headers_for(super_admin)
        )
        assert response.status_code == 404

    def test_update_merges_config(self, client, db_session, admin, landlord, primary_tenant):
        response = client.patch(
            f"/api/landlords/{landlord.id}/tenants/{primary_tenant.id}",
            headers=headers_for(admin),
            json={"name": "Iron Dojo Central", "config": {"timezone": "UTC"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Iron Dojo Central"
        assert data["config"]["timezone"] == "UTC"
        assert data["config"]["is_primary_tenant"] is True

        SetupService(db_session).install_defaults(landlord.id)
        assert db_session.query(Tenant).filter(Tenant.landlord_id == landlord.id).count() == 1

    def test_update_by_admin_of_other_landlord_denied(self, client, db_session, admin, other_landlord):
        foreign = db_session.query(Tenant).filter(Tenant.landlord_id == other_landlord.id).first()

        response = client.patch(
            f"/api/landlords/{other_landlord.id}/tenants/{foreign.id}",
            headers=headers_for(admin),
            json={"name": "Hijack"},
        )
        assert response.status_code == 403
