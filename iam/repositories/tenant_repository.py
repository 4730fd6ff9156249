"""Repository for Tenant model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.tenant import Tenant


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: uuid.UUID) -> Tenant | None:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant ID

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_by_landlord(self, landlord_id: uuid.UUID) -> list[Tenant]:
        """
        Get all tenants of a landlord.

        Args:
            landlord_id: Landlord ID

        Returns:
            List of Tenant objects ordered by name
        """
        return (
            self.db.query(Tenant)
            .filter(Tenant.landlord_id == landlord_id)
            .order_by(Tenant.name)
            .all()
        )

    def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return self.db.query(Tenant).filter(Tenant.landlord_id == landlord_id).count()

    def create(self, tenant: Tenant) -> Tenant:
        """
        Create a new tenant.

        Args:
            tenant: Tenant object to create

        Returns:
            Created Tenant object with ID populated
        """
        self.db.add(tenant)
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def update(self, tenant: Tenant) -> Tenant:
        """
        Update existing tenant.

        Args:
            tenant: Tenant object with modified fields

        Returns:
            Updated Tenant object
        """
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
