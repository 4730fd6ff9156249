"""Landlord-scoped role model for role-based access control."""

import uuid

from sqlalchemy import String, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.landlord import Landlord
    from iam.models.role_permission import RolePermission


class Role(Base, TimestampMixin):
    """
    Named bundle of permissions, scoped to a landlord.

    Examples (created by the setup flow):
    - "admin" - full management of users, roles, permissions and policies
    - "instructor" - read/update members, manage classes
    - "receptionist" - front desk registration

    The reserved code configured as SUPER_ADMIN_ROLE_CODE bypasses policy
    evaluation entirely.

    Constraints:
    - Unique(landlord_id, code)
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("landlords.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    landlord: Mapped["Landlord"] = relationship("Landlord", back_populates="roles")
    role_permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("landlord_id", "code", name="uq_role_landlord_code"),
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, code='{self.code}', landlord_id={self.landlord_id})>"
