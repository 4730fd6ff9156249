"""Repository for RolePermission model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.role_permission import RolePermission


class RolePermissionRepository:
    """Repository for RolePermission model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, role_id: uuid.UUID, permission_id: uuid.UUID) -> RolePermission | None:
        """
        Get the association between a role and a permission.

        Args:
            role_id: Role ID
            permission_id: Permission ID

        Returns:
            RolePermission object or None if not found
        """
        return (
            self.db.query(RolePermission)
            .filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
            .first()
        )

    def get_by_role(self, role_id: uuid.UUID) -> list[RolePermission]:
        """
        Get every permission association of a role.

        Args:
            role_id: Role ID

        Returns:
            List of RolePermission objects in creation order
        """
        return (
            self.db.query(RolePermission)
            .filter(RolePermission.role_id == role_id)
            .order_by(RolePermission.created_at, RolePermission.id)
            .all()
        )

    def count_by_policy(self, policy_id: uuid.UUID) -> int:
        """Count associations overriding their policy with this one"""
        return self.db.query(RolePermission).filter(RolePermission.policy_id == policy_id).count()

    def count_by_permission(self, permission_id: uuid.UUID) -> int:
        """Count roles holding the permission"""
        return self.db.query(RolePermission).filter(RolePermission.permission_id == permission_id).count()

    def create(self, association: RolePermission) -> RolePermission:
        """
        Create a new association.

        Raises:
            IntegrityError: If (role_id, permission_id) already exists
        """
        self.db.add(association)
        self.db.commit()
        self.db.refresh(association)
        return association

    def update(self, association: RolePermission) -> RolePermission:
        """Persist changes to an association"""
        self.db.commit()
        self.db.refresh(association)
        return association

    def delete(self, association: RolePermission) -> None:
        """Remove the association"""
        self.db.delete(association)
        self.db.commit()
