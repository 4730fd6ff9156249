"""Grant model linking users to roles inside a tenant."""

import uuid

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.user import User
    from iam.models.tenant import Tenant
    from iam.models.role import Role


class UserTenantRole(Base, TimestampMixin):
    """
    Join table granting a user a role within a tenant.

    This is the only way a user obtains a role, and through it any
    permission, in a tenant:
    - One user can hold several roles in the same tenant
    - One user can belong to several tenants
    - Roles held in tenant A never influence decisions in tenant B

    Example grants:
    - User "Alice" has role "admin" in tenant "Downtown Branch"
    - User "Alice" has role "instructor" in tenant "Downtown Branch"
    - User "Bob" has role "receptionist" in tenant "Uptown Branch"

    Constraints:
    - Unique(user_id, tenant_id, role_id) - no duplicate grants
    """

    __tablename__ = "user_tenant_roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="grants")
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="grants")
    role: Mapped["Role"] = relationship("Role")

    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", "role_id", name="uq_user_tenant_role"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserTenantRole(user_id={self.user_id}, tenant_id={self.tenant_id}, "
            f"role_id={self.role_id})>"
        )
