"""Repository for Permission model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.permission import Permission


class PermissionRepository:
    """Repository for Permission model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, permission_id: uuid.UUID) -> Permission | None:
        """Get permission by ID"""
        return self.db.query(Permission).filter(Permission.id == permission_id).first()

    def get_by_action_and_resource(
        self, landlord_id: uuid.UUID, action: str, resource: str
    ) -> Permission | None:
        """
        Get permission by its natural key.

        Args:
            landlord_id: Owning landlord ID
            action: Action name, e.g. "update"
            resource: Resource name, e.g. "members"

        Returns:
            Permission object or None if not found
        """
        return (
            self.db.query(Permission)
            .filter(
                Permission.landlord_id == landlord_id,
                Permission.action == action,
                Permission.resource == resource,
            )
            .first()
        )

    def get_by_landlord(self, landlord_id: uuid.UUID) -> list[Permission]:
        """Get all permissions of a landlord ordered by resource then action"""
        return (
            self.db.query(Permission)
            .filter(Permission.landlord_id == landlord_id)
            .order_by(Permission.resource, Permission.action)
            .all()
        )

    def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return self.db.query(Permission).filter(Permission.landlord_id == landlord_id).count()

    def count_by_policy(self, policy_id: uuid.UUID) -> int:
        """Count permissions using the policy as their default"""
        return self.db.query(Permission).filter(Permission.policy_id == policy_id).count()

    def create(self, permission: Permission) -> Permission:
        """Create new permission"""
        self.db.add(permission)
        self.db.commit()
        self.db.refresh(permission)
        return permission

    def update(self, permission: Permission) -> Permission:
        """Update existing permission"""
        self.db.commit()
        self.db.refresh(permission)
        return permission

    def delete(self, permission: Permission) -> None:
        self.db.delete(permission)
        self.db.commit()
