"""Tenant model for multi-tenant isolation."""

import uuid

from sqlalchemy import String, JSON, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.landlord import Landlord
    from iam.models.policy import Policy
    from iam.models.user_tenant_role import UserTenantRole


class Tenant(Base, TimestampMixin):
    """
    Organizational unit under a landlord (e.g. one branch of a network).

    Every tenant belongs to exactly one landlord. Users gain access to a
    tenant only through UserTenantRole grants; policies are scoped to a
    tenant.
    """

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("landlords.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Relationships
    landlord: Mapped["Landlord"] = relationship("Landlord", back_populates="tenants")
    policies: Mapped[list["Policy"]] = relationship(
        "Policy",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    grants: Mapped[list["UserTenantRole"]] = relationship(
        "UserTenantRole",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', landlord_id={self.landlord_id})>"
