"""Tests for /api/tenants/{tenant_id}/policies"""

import uuid

import pytest
from tests.conftest import headers_for, permission_by_key


def policy_payload(**overrides) -> dict:
    payload = {
        "code": "late_night_block",
        "name": "Late Night Block",
        "description": "No member edits after hours",
        "effect": "deny",
        "actions": ["update"],
        "resources": ["members"],
        "conditions": {"after_hours": True},
    }
    payload.update(overrides)
    return payload


class TestCreatePolicy:
    def test_admin_creates_policy(self, client, admin, primary_tenant):
        response = client.post(
            f"/api/tenants/{primary_tenant.id}/policies",
            headers=headers_for(admin),
            json=policy_payload(),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "late_night_block"
        assert data["effect"] == "deny"
        assert data["tenant_id"] == str(primary_tenant.id)
        assert data["tenant_wide"] is False
        assert data["conditions"] == {"after_hours": True}

    def test_duplicate_code_is_conflict(self, client, admin, primary_tenant):
        url = f"/api/tenants/{primary_tenant.id}/policies"
        client.post(url, headers=headers_for(admin), json=policy_payload())

        response = client.post(url, headers=headers_for(admin), json=policy_payload(name="Other Name"))

        assert response.status_code == 409

    def test_duplicate_name_is_conflict(self, client, admin, primary_tenant):
        url = f"/api/tenants/{primary_tenant.id}/policies"
        client.post(url, headers=headers_for(admin), json=policy_payload())

        response = client.post(url, headers=headers_for(admin), json=policy_payload(code="other_code"))

        assert response.status_code == 409

    def test_empty_actions_rejected(self, client, admin, primary_tenant):
        response = client.post(
            f"/api/tenants/{primary_tenant.id}/policies",
            headers=headers_for(admin),
            json=policy_payload(actions=[]),
        )
        assert response.status_code == 422

    def test_blank_resources_rejected(self, client, admin, primary_tenant):
        response = client.post(
            f"/api/tenants/{primary_tenant.id}/policies",
            headers=headers_for(admin),
            json=policy_payload(resources=["  "]),
        )
        assert response.status_code == 400

    def test_instructor_cannot_manage_policies(self, client, instructor, primary_tenant):
        response = client.post(
            f"/api/tenants/{primary_tenant.id}/policies",
            headers=headers_for(instructor),
            json=policy_payload(),
        )

        assert response.status_code == 403
        assert "manage:policies" in response.json()["detail"]

    def test_admin_of_other_tenant_denied(self, client, admin, branch_tenant):
        response = client.get(f"/api/tenants/{branch_tenant.id}/policies", headers=headers_for(admin))

        assert response.status_code == 403
        assert response.json()["detail"] == f"Access denied to tenant: {branch_tenant.id}"

    def test_malformed_tenant_id(self, client, admin):
        response = client.get("/api/tenants/not-a-uuid/policies", headers=headers_for(admin))
        assert response.status_code == 400


class TestReadUpdateDelete:
    def test_list_includes_defaults(self, client, admin, primary_tenant):
        response = client.get(f"/api/tenants/{primary_tenant.id}/policies", headers=headers_for(admin))

        assert response.status_code == 200
        codes = {p["code"] for p in response.json()}
        assert {"admin_full_access", "instructor_access", "financial_access", "reception_access"} <= codes

    def test_get_unknown_policy_is_not_found(self, client, admin, primary_tenant):
        response = client.get(
            f"/api/tenants/{primary_tenant.id}/policies/{uuid.uuid4()}", headers=headers_for(admin)
        )
        assert response.status_code == 404

    def test_update_changes_next_decision(self, client, admin, instructor, primary_tenant):
        headers = headers_for(admin)
        policies = client.get(f"/api/tenants/{primary_tenant.id}/policies", headers=headers).json()
        instructor_access = next(p for p in policies if p["code"] == "instructor_access")

        response = client.put(
            f"/api/tenants/{primary_tenant.id}/policies/{instructor_access['id']}",
            headers=headers,
            json={
                "name": instructor_access["name"],
                "effect": "allow",
                "actions": ["read", "update", "create", "manage"],
                "resources": ["members", "classes"],
                "conditions": {"shift": "day"},
            },
        )
        assert response.status_code == 200
        assert response.json()["conditions"] == {"shift": "day"}

        decide = client.post(
            "/api/access/decide",
            headers=headers_for(instructor),
            json={"tenant_id": str(primary_tenant.id), "action": "update", "resource": "members"},
        )
        assert decide.json()["allowed"] is False

    def test_delete_unreferenced_policy(self, client, admin, primary_tenant):
        headers = headers_for(admin)
        created = client.post(
            f"/api/tenants/{primary_tenant.id}/policies", headers=headers, json=policy_payload()
        ).json()

        response = client.delete(f"/api/tenants/{primary_tenant.id}/policies/{created['id']}", headers=headers)
        assert response.status_code == 204

        response = client.get(f"/api/tenants/{primary_tenant.id}/policies/{created['id']}", headers=headers)
        assert response.status_code == 404

    def test_delete_referenced_policy_is_conflict(self, client, db_session, admin, landlord, primary_tenant):
        policy_id = permission_by_key(db_session, landlord, "update", "members").policy_id

        response = client.delete(
            f"/api/tenants/{primary_tenant.id}/policies/{policy_id}", headers=headers_for(admin)
        )

        assert response.status_code == 409
