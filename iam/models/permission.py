"""Permission model: an (action, resource) pair owned by a landlord."""

import uuid

from sqlalchemy import String, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.landlord import Landlord
    from iam.models.policy import Policy
    from iam.models.role_permission import RolePermission


class Permission(Base, TimestampMixin):
    """
    Action on a resource, e.g. ``update:members``.

    A permission may point at a default policy. Role-permission
    associations with inherit_policy=True and no override use it.

    Constraints:
    - Unique(landlord_id, action, resource)
    """

    __tablename__ = "permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("landlords.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource: Mapped[str] = mapped_column(String(100), nullable=False)
    policy_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("policies.id", ondelete="RESTRICT"),
        nullable=True,
    )

    # Relationships
    landlord: Mapped["Landlord"] = relationship("Landlord", back_populates="permissions")
    policy: Mapped["Policy | None"] = relationship("Policy")
    role_permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="permission",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("landlord_id", "action", "resource", name="uq_permission_landlord_action_resource"),
    )

    @property
    def key(self) -> str:
        """Permission string in ``action:resource`` form"""
        return f"{self.action}:{self.resource}"

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, key='{self.key}')>"
