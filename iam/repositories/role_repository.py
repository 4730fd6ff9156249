"""Repository for Role model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.role import Role


class RoleRepository:
    """Repository for Role model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, role_id: uuid.UUID) -> Role | None:
        """Get role by ID"""
        return self.db.query(Role).filter(Role.id == role_id).first()

    def get_by_code(self, landlord_id: uuid.UUID, code: str) -> Role | None:
        """
        Get role by code within a landlord.

        Args:
            landlord_id: Owning landlord ID
            code: Role code (unique per landlord)

        Returns:
            Role object or None if not found
        """
        return (
            self.db.query(Role)
            .filter(Role.landlord_id == landlord_id, Role.code == code)
            .first()
        )

    def get_by_landlord(self, landlord_id: uuid.UUID) -> list[Role]:
        """Get all roles of a landlord ordered by code"""
        return (
            self.db.query(Role)
            .filter(Role.landlord_id == landlord_id)
            .order_by(Role.code)
            .all()
        )

    def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return self.db.query(Role).filter(Role.landlord_id == landlord_id).count()

    def create(self, role: Role) -> Role:
        """Create new role"""
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        return role

    def update(self, role: Role) -> Role:
        """Update existing role"""
        self.db.commit()
        self.db.refresh(role)
        return role

    def delete(self, role: Role) -> None:
        """Delete role (its role-permission associations go with it)"""
        self.db.delete(role)
        self.db.commit()
