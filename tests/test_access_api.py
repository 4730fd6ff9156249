"""Tests for /api/access"""

import uuid

import pytest
from tests.conftest import headers_for


def decide(client, user, tenant_id, action, resource, context=None):
    payload = {"tenant_id": str(tenant_id), "action": action, "resource": resource}
    if context is not None:
        payload["context"] = context
    return client.post("/api/access/decide", headers=headers_for(user), json=payload)


class TestDecide:
    def test_instructor_updates_members(self, client, instructor, primary_tenant):
        response = decide(client, instructor, primary_tenant.id, "update", "members")

        assert response.status_code == 200
        assert response.json() == {
            "allowed": True,
            "effect": "allow",
            "reason": "Allowed by policy 'instructor_access'",
            "policy_code": "instructor_access",
        }

    def test_instructor_cannot_delete_members(self, client, instructor, primary_tenant):
        response = decide(client, instructor, primary_tenant.id, "delete", "members")

        assert response.status_code == 200
        assert response.json()["allowed"] is False
        assert response.json()["effect"] == "deny"

    def test_context_reaches_conditions(self, client, financial_manager, primary_tenant):
        allowed = decide(client, financial_manager, primary_tenant.id, "read", "payments", {"department": "financial"})
        denied = decide(client, financial_manager, primary_tenant.id, "read", "payments", {"department": "dojo"})

        assert allowed.json()["allowed"] is True
        assert denied.json()["allowed"] is False

    def test_other_tenant_denied(self, client, instructor, branch_tenant):
        response = decide(client, instructor, branch_tenant.id, "update", "members")

        assert response.json()["allowed"] is False
        assert response.json()["reason"] == "No role in tenant"

    def test_super_admin_allowed(self, client, super_admin, branch_tenant):
        response = decide(client, super_admin, branch_tenant.id, "delete", "everything")
        assert response.json()["allowed"] is True

    def test_unknown_tenant_is_bad_request(self, client, instructor):
        response = decide(client, instructor, uuid.uuid4(), "update", "members")
        assert response.status_code == 400

    def test_requires_authentication(self, client, primary_tenant):
        response = client.post(
            "/api/access/decide",
            json={"tenant_id": str(primary_tenant.id), "action": "read", "resource": "members"},
        )
        assert response.status_code == 401


class TestGrantedPermissions:
    def test_lists_caller_permissions(self, client, instructor, primary_tenant):
        response = client.get(
            f"/api/access/tenants/{primary_tenant.id}/permissions", headers=headers_for(instructor)
        )

        assert response.status_code == 200
        granted = {f"{g['action']}:{g['resource']}": g for g in response.json()}
        assert granted["update:members"]["policy_code"] == "instructor_access"
        assert granted["update:members"]["source"] == "inherited"

    def test_non_member_denied(self, client, instructor, branch_tenant):
        response = client.get(
            f"/api/access/tenants/{branch_tenant.id}/permissions", headers=headers_for(instructor)
        )
        assert response.status_code == 403
