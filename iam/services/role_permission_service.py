"""
Role-permission resolution and administration.

Resolves the effective (permission, policy) pairs of a role and manages
the RolePermission associations that feed that resolution.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum as PyEnum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from iam.models.permission import Permission
from iam.models.policy import Policy
from iam.models.role import Role
from iam.models.role_permission import RolePermission
from iam.repositories.permission_repository import PermissionRepository
from iam.repositories.policy_repository import PolicyRepository
from iam.repositories.role_permission_repository import RolePermissionRepository
from iam.repositories.role_repository import RoleRepository
from iam.core.exceptions import (
    ConflictException,
    DataIntegrityError,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class PolicySource(str, PyEnum):
    """Where the effective policy of an association comes from"""

    OVERRIDE = "override"
    INHERITED = "inherited"
    NONE = "none"


@dataclass(frozen=True)
class EffectivePermission:
    """A permission granted by a role together with the policy governing it"""

    permission: Permission
    policy: Policy | None
    source: PolicySource

    @property
    def key(self) -> tuple[uuid.UUID, uuid.UUID | None]:
        return (self.permission.id, self.policy.id if self.policy else None)


def effective_policy_of(association: RolePermission) -> tuple[Policy | None, PolicySource]:
    """
    Apply the override / inheritance rule to one association.

    Raises:
        DataIntegrityError: If the association references rows that no longer exist
    """
    permission = association.permission
    if permission is None:
        raise DataIntegrityError(
            f"Role-permission {association.id} references missing permission {association.permission_id}"
        )

    if association.policy_id is not None:
        if association.policy is None:
            raise DataIntegrityError(
                f"Role-permission {association.id} references missing policy {association.policy_id}"
            )
        return association.policy, PolicySource.OVERRIDE

    if association.inherit_policy and permission.policy_id is not None:
        if permission.policy is None:
            raise DataIntegrityError(
                f"Permission {permission.id} references missing policy {permission.policy_id}"
            )
        return permission.policy, PolicySource.INHERITED

    return None, PolicySource.NONE


class RolePermissionService:
    """Service for role-permission resolution and association management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RolePermissionRepository(db)
        self.role_repo = RoleRepository(db)
        self.permission_repo = PermissionRepository(db)
        self.policy_repo = PolicyRepository(db)

    def resolve_effective_permissions(self, role_id: uuid.UUID) -> list[EffectivePermission]:
        """
        Compute the effective (permission, policy) pairs of a role.

        Effective policy per association:
        - override policy if present
        - else the permission's default policy when inherit_policy is set
        - else no policy (the access resolver treats it as DENY)

        Args:
            role_id: Role to resolve

        Returns:
            One EffectivePermission per association, without duplicates

        Raises:
            NotFoundException: If the role does not exist
            DataIntegrityError: If an association references missing rows
        """
        self._require_role(role_id)

        result: list[EffectivePermission] = []
        seen: set[uuid.UUID] = set()
        for association in self.repo.get_by_role(role_id):
            if association.permission_id in seen:
                continue
            seen.add(association.permission_id)
            policy, source = effective_policy_of(association)
            result.append(EffectivePermission(association.permission, policy, source))
        return result

    def list_role_permissions(self, role_id: uuid.UUID) -> list[RolePermission]:
        """List the raw associations of a role"""
        self._require_role(role_id)
        return self.repo.get_by_role(role_id)

    def get_association(self, role_id: uuid.UUID, permission_id: uuid.UUID) -> RolePermission:
        """
        Get one association.

        Raises:
            NotFoundException: If the role does not hold the permission
        """
        association = self.repo.get(role_id, permission_id)
        if not association:
            raise NotFoundException("Role-permission association not found")
        return association

    def attach_permission(
        self,
        role_id: uuid.UUID,
        permission_id: uuid.UUID,
        policy_id: uuid.UUID | None = None,
        inherit_policy: bool = True,
    ) -> RolePermission:
        """
        Grant a permission to a role.

        Args:
            role_id: Role receiving the permission
            permission_id: Permission to grant
            policy_id: Optional override policy
            inherit_policy: Fall back to the permission's default policy when no override

        Returns:
            Created association

        Raises:
            NotFoundException: If role, permission or policy does not exist
            ValidationException: If role, permission and policy span landlords
            ConflictException: If the role already holds the permission
        """
        role = self._require_role(role_id)
        permission = self._require_permission(permission_id)
        if role.landlord_id != permission.landlord_id:
            raise ValidationException("Role and permission belong to different landlords")
        self._validate_policy(policy_id, role)

        if self.repo.get(role_id, permission_id):
            raise ConflictException(
                f"Role '{role.code}' already has permission {permission.key}; update its policy instead"
            )

        association = RolePermission(
            role_id=role_id,
            permission_id=permission_id,
            policy_id=policy_id,
            inherit_policy=inherit_policy,
        )
        try:
            association = self.repo.create(association)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"Role '{role.code}' already has permission {permission.key}")

        logger.info(
            "Attached %s to role %s (policy=%s, inherit=%s)",
            permission.key, role.code, policy_id, inherit_policy,
        )
        return association

    def update_policy(
        self,
        role_id: uuid.UUID,
        permission_id: uuid.UUID,
        policy_id: uuid.UUID | None,
        inherit_policy: bool,
    ) -> RolePermission:
        """
        Change the override policy and inheritance flag of an association.

        Raises:
            NotFoundException: If the association or the policy does not exist
            ValidationException: If the policy belongs to another landlord
        """
        association = self.get_association(role_id, permission_id)
        self._validate_policy(policy_id, association.role)

        association.policy_id = policy_id
        association.inherit_policy = inherit_policy
        association = self.repo.update(association)

        logger.info(
            "Updated policy of role %s permission %s (policy=%s, inherit=%s)",
            role_id, permission_id, policy_id, inherit_policy,
        )
        return association

    def detach_permission(self, role_id: uuid.UUID, permission_id: uuid.UUID) -> bool:
        """
        Revoke a permission from a role.

        Idempotent: returns False when there was nothing to remove.
        """
        association = self.repo.get(role_id, permission_id)
        if not association:
            return False

        self.repo.delete(association)
        logger.info("Detached permission %s from role %s", permission_id, role_id)
        return True

    def _require_role(self, role_id: uuid.UUID) -> Role:
        role = self.role_repo.get_by_id(role_id)
        if not role:
            raise NotFoundException(f"Role {role_id} not found")
        return role

    def _require_permission(self, permission_id: uuid.UUID) -> Permission:
        permission = self.permission_repo.get_by_id(permission_id)
        if not permission:
            raise NotFoundException(f"Permission {permission_id} not found")
        return permission

    def _validate_policy(self, policy_id: uuid.UUID | None, role: Role) -> None:
        if policy_id is None:
            return
        policy = self.policy_repo.get_by_id(policy_id)
        if not policy:
            raise NotFoundException(f"Policy {policy_id} not found")
        if policy.tenant.landlord_id != role.landlord_id:
            raise ValidationException("Policy does not belong to the role's landlord")
