"""Repository for Policy model operations."""

import uuid

from sqlalchemy.orm import Session
from iam.models.policy import Policy
from iam.models.tenant import Tenant


class PolicyRepository:
    """Repository for Policy model operations with tenant scoping"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, policy_id: uuid.UUID) -> Policy | None:
        """Get policy by ID regardless of tenant"""
        return self.db.query(Policy).filter(Policy.id == policy_id).first()

    def get_by_id_and_tenant(self, policy_id: uuid.UUID, tenant_id: uuid.UUID) -> Policy | None:
        """
        Get policy ensuring it belongs to the tenant (multi-tenant safety).

        Returns None if policy doesn't exist or belongs to another tenant.
        """
        return (
            self.db.query(Policy)
            .filter(Policy.id == policy_id, Policy.tenant_id == tenant_id)
            .first()
        )

    def get_by_code(self, tenant_id: uuid.UUID, code: str) -> Policy | None:
        return (
            self.db.query(Policy)
            .filter(Policy.tenant_id == tenant_id, Policy.code == code)
            .first()
        )

    def get_by_name(self, tenant_id: uuid.UUID, name: str) -> Policy | None:
        return (
            self.db.query(Policy)
            .filter(Policy.tenant_id == tenant_id, Policy.name == name)
            .first()
        )

    def get_by_tenant(self, tenant_id: uuid.UUID) -> list[Policy]:
        """Get all policies of a tenant ordered by code"""
        return (
            self.db.query(Policy)
            .filter(Policy.tenant_id == tenant_id)
            .order_by(Policy.code)
            .all()
        )

    def get_tenant_wide(self, tenant_id: uuid.UUID) -> list[Policy]:
        """Get standalone policies that take part in every decision of the tenant"""
        return (
            self.db.query(Policy)
            .filter(Policy.tenant_id == tenant_id, Policy.tenant_wide.is_(True))
            .order_by(Policy.code)
            .all()
        )

    def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return (
            self.db.query(Policy)
            .join(Tenant, Policy.tenant_id == Tenant.id)
            .filter(Tenant.landlord_id == landlord_id)
            .count()
        )

    def create(self, policy: Policy) -> Policy:
        """Create new policy"""
        self.db.add(policy)
        self.db.commit()
        self.db.refresh(policy)
        return policy

    def update(self, policy: Policy) -> Policy:
        """Update existing policy"""
        self.db.commit()
        self.db.refresh(policy)
        return policy

    def delete(self, policy: Policy) -> None:
        """Delete policy (must not be referenced by a permission or role-permission)"""
        self.db.delete(policy)
        self.db.commit()
