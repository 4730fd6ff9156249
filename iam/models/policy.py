"""ABAC policy model."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import String, Text, Boolean, ForeignKey, Enum, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.tenant import Tenant


class PolicyEffect(str, PyEnum):
    """Outcome a policy produces when it applies"""

    ALLOW = "allow"
    DENY = "deny"


class Policy(Base, TimestampMixin):
    """
    Attribute-based access rule scoped to a tenant.

    A policy applies to a request when the requested action is listed in
    ``actions``, the requested resource is listed in ``resources`` and
    every entry of ``conditions`` is satisfied by the request context.

    Example conditions:
    - {"department": "financial"}
    - {"clearance": {"$gte": 3}, "region": {"$in": ["eu", "us"]}}

    Policies flagged ``tenant_wide`` take part in every decision inside
    their tenant, independently of role linkage.

    Constraints:
    - Unique(tenant_id, code)
    - Unique(tenant_id, name)
    """

    __tablename__ = "policies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    effect: Mapped[PolicyEffect] = mapped_column(
        Enum(PolicyEffect, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=PolicyEffect.ALLOW,
    )
    actions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    resources: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    conditions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    tenant_wide: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="policies")

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_policy_tenant_code"),
        UniqueConstraint("tenant_id", "name", name="uq_policy_tenant_name"),
    )

    def __repr__(self) -> str:
        return f"<Policy(id={self.id}, code='{self.code}', effect={self.effect.value})>"
