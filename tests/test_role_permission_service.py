import uuid

import pytest

from iam.core.exceptions import (
    ConflictException,
    DataIntegrityError,
    NotFoundException,
    ValidationException,
)
from iam.models.policy import Policy
from iam.models.role import Role
from iam.models.role_permission import RolePermission
from iam.models.tenant import Tenant
from iam.services.role_permission_service import PolicySource, RolePermissionService
from tests.conftest import permission_by_key, role_by_code


@pytest.fixture
def coach_role(db_session, landlord):
    """Empty role to attach permissions to"""
    role = Role(landlord_id=landlord.id, code="coach", name="Coach")
    db_session.add(role)
    db_session.commit()
    db_session.refresh(role)
    return role


def policy_by_code(db, code) -> Policy:
    return db.query(Policy).filter(Policy.code == code).first()


class TestResolveEffectivePermissions:
    def test_inherited_policy_from_permission_default(self, db_session, landlord):
        instructor = role_by_code(db_session, landlord, "instructor")

        effective = RolePermissionService(db_session).resolve_effective_permissions(instructor.id)

        by_key = {e.permission.key: e for e in effective}
        assert len(by_key) == 7
        assert by_key["update:members"].policy.code == "instructor_access"
        assert by_key["update:members"].source == PolicySource.INHERITED
        assert "delete:members" not in by_key

    def test_override_policy_wins_over_default(self, db_session, landlord, coach_role):
        service = RolePermissionService(db_session)
        permission = permission_by_key(db_session, landlord, "update", "members")
        override = policy_by_code(db_session, "reception_access")

        service.attach_permission(coach_role.id, permission.id, policy_id=override.id)

        [effective] = service.resolve_effective_permissions(coach_role.id)
        assert effective.policy.id == override.id
        assert effective.source == PolicySource.OVERRIDE

    def test_no_inherit_and_no_override_has_no_policy(self, db_session, landlord, coach_role):
        service = RolePermissionService(db_session)
        permission = permission_by_key(db_session, landlord, "update", "members")

        service.attach_permission(coach_role.id, permission.id, inherit_policy=False)

        [effective] = service.resolve_effective_permissions(coach_role.id)
        assert effective.policy is None
        assert effective.source == PolicySource.NONE
        assert effective.key == (permission.id, None)

    def test_empty_role_resolves_to_empty_list(self, db_session, coach_role):
        assert RolePermissionService(db_session).resolve_effective_permissions(coach_role.id) == []

    def test_unknown_role_raises_not_found(self, db_session):
        with pytest.raises(NotFoundException):
            RolePermissionService(db_session).resolve_effective_permissions(uuid.uuid4())

    def test_dangling_override_policy_is_integrity_error(self, db_session, landlord, coach_role):
        permission = permission_by_key(db_session, landlord, "read", "classes")
        # SQLite does not enforce foreign keys here, so the row can point nowhere
        db_session.add(
            RolePermission(role_id=coach_role.id, permission_id=permission.id, policy_id=uuid.uuid4())
        )
        db_session.commit()

        with pytest.raises(DataIntegrityError):
            RolePermissionService(db_session).resolve_effective_permissions(coach_role.id)


class TestAttachDetach:
    def test_attach_returns_association(self, db_session, landlord, coach_role):
        permission = permission_by_key(db_session, landlord, "read", "members")

        association = RolePermissionService(db_session).attach_permission(coach_role.id, permission.id)

        assert association.role_id == coach_role.id
        assert association.permission_id == permission.id
        assert association.policy_id is None
        assert association.inherit_policy is True

    def test_attach_twice_is_conflict(self, db_session, landlord, coach_role):
        service = RolePermissionService(db_session)
        permission = permission_by_key(db_session, landlord, "read", "members")
        service.attach_permission(coach_role.id, permission.id)

        with pytest.raises(ConflictException):
            service.attach_permission(coach_role.id, permission.id)

        assert len(service.list_role_permissions(coach_role.id)) == 1

    def test_detach_is_idempotent(self, db_session, landlord, coach_role):
        service = RolePermissionService(db_session)
        permission = permission_by_key(db_session, landlord, "read", "members")
        service.attach_permission(coach_role.id, permission.id)

        assert service.detach_permission(coach_role.id, permission.id) is True
        assert service.detach_permission(coach_role.id, permission.id) is False
        assert service.list_role_permissions(coach_role.id) == []

    def test_attach_unknown_permission_is_not_found(self, db_session, coach_role):
        with pytest.raises(NotFoundException):
            RolePermissionService(db_session).attach_permission(coach_role.id, uuid.uuid4())

    def test_attach_across_landlords_is_rejected(self, db_session, landlord, other_landlord):
        foreign_role = role_by_code(db_session, other_landlord, "instructor")
        permission = permission_by_key(db_session, landlord, "read", "members")

        with pytest.raises(ValidationException):
            RolePermissionService(db_session).attach_permission(foreign_role.id, permission.id)

    def test_override_policy_from_other_landlord_is_rejected(
        self, db_session, landlord, other_landlord, coach_role
    ):
        permission = permission_by_key(db_session, landlord, "read", "members")
        foreign = (
            db_session.query(Policy)
            .join(Policy.tenant)
            .filter(Tenant.landlord_id == other_landlord.id, Policy.code == "admin_full_access")
            .one()
        )

        with pytest.raises(ValidationException):
            RolePermissionService(db_session).attach_permission(
                coach_role.id, permission.id, policy_id=foreign.id
            )


class TestUpdatePolicy:
    def test_update_switches_to_override(self, db_session, landlord):
        service = RolePermissionService(db_session)
        instructor = role_by_code(db_session, landlord, "instructor")
        permission = permission_by_key(db_session, landlord, "update", "members")
        admin_policy = policy_by_code(db_session, "admin_full_access")

        updated = service.update_policy(instructor.id, permission.id, admin_policy.id, True)

        assert updated.policy_id == admin_policy.id
        effective = {e.permission.key: e for e in service.resolve_effective_permissions(instructor.id)}
        assert effective["update:members"].source == PolicySource.OVERRIDE
        assert effective["update:members"].policy.code == "admin_full_access"

    def test_update_missing_association_is_not_found(self, db_session, landlord, coach_role):
        permission = permission_by_key(db_session, landlord, "update", "members")

        with pytest.raises(NotFoundException):
            RolePermissionService(db_session).update_policy(coach_role.id, permission.id, None, False)
