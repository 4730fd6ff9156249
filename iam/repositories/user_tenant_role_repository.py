"""Repository for UserTenantRole model operations."""

import uuid

from sqlalchemy.orm import Session, joinedload
from iam.models.role import Role
from iam.models.user_tenant_role import UserTenantRole


class UserTenantRoleRepository:
    """Repository for UserTenantRole model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(
        self, user_id: uuid.UUID, tenant_id: uuid.UUID, role_id: uuid.UUID
    ) -> UserTenantRole | None:
        """Get a single grant by its (user, tenant, role) triple"""
        return (
            self.db.query(UserTenantRole)
            .filter(
                UserTenantRole.user_id == user_id,
                UserTenantRole.tenant_id == tenant_id,
                UserTenantRole.role_id == role_id,
            )
            .first()
        )

    def get_roles(self, user_id: uuid.UUID, tenant_id: uuid.UUID) -> list[Role]:
        """
        Get the roles a user holds in one tenant.

        Only grants of this tenant are read, so roles held elsewhere never
        leak into the result.

        Args:
            user_id: User ID
            tenant_id: Tenant ID

        Returns:
            List of Role objects ordered by code
        """
        return (
            self.db.query(Role)
            .join(UserTenantRole, UserTenantRole.role_id == Role.id)
            .filter(
                UserTenantRole.user_id == user_id,
                UserTenantRole.tenant_id == tenant_id,
            )
            .order_by(Role.code)
            .all()
        )

    def get_user_grants(self, user_id: uuid.UUID) -> list[UserTenantRole]:
        """
        Get all grants of a user across every tenant, roles eagerly loaded.

        Args:
            user_id: User ID

        Returns:
            List of UserTenantRole objects for the user
        """
        return (
            self.db.query(UserTenantRole)
            .options(joinedload(UserTenantRole.role))
            .filter(UserTenantRole.user_id == user_id)
            .all()
        )

    def get_tenant_grants(self, tenant_id: uuid.UUID) -> list[UserTenantRole]:
        """Get all grants inside a tenant"""
        return (
            self.db.query(UserTenantRole)
            .options(joinedload(UserTenantRole.role))
            .filter(UserTenantRole.tenant_id == tenant_id)
            .all()
        )

    def user_has_role_code(self, user_id: uuid.UUID, code: str) -> bool:
        """Check if the user holds a role with this code in any tenant"""
        return (
            self.db.query(UserTenantRole)
            .join(Role, UserTenantRole.role_id == Role.id)
            .filter(UserTenantRole.user_id == user_id, Role.code == code)
            .first()
            is not None
        )

    def count_by_role(self, role_id: uuid.UUID) -> int:
        """Count grants of the role across every tenant"""
        return self.db.query(UserTenantRole).filter(UserTenantRole.role_id == role_id).count()

    def create(self, grant: UserTenantRole) -> UserTenantRole:
        """
        Create a new grant.

        Raises:
            IntegrityError: If (user_id, tenant_id, role_id) already exists
        """
        self.db.add(grant)
        self.db.commit()
        self.db.refresh(grant)
        return grant

    def delete(self, grant: UserTenantRole) -> None:
        """Revoke a grant"""
        self.db.delete(grant)
        self.db.commit()
