"""Join model linking roles to permissions with an optional policy override."""

import uuid

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.role import Role
    from iam.models.permission import Permission
    from iam.models.policy import Policy


class RolePermission(Base, TimestampMixin):
    """
    Grants a permission to a role.

    Effective policy of the association:
    - policy_id set -> that policy (override)
    - policy_id empty and inherit_policy -> the permission's default policy
    - policy_id empty and not inherit_policy -> no policy (implicit DENY)

    Constraints:
    - Unique(role_id, permission_id) - updates go through the update path
    """

    __tablename__ = "role_permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    policy_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("policies.id", ondelete="RESTRICT"),
        nullable=True,
    )
    inherit_policy: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    role: Mapped["Role"] = relationship("Role", back_populates="role_permissions")
    permission: Mapped["Permission"] = relationship("Permission", back_populates="role_permissions")
    policy: Mapped["Policy | None"] = relationship("Policy")

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    def __repr__(self) -> str:
        return (
            f"<RolePermission(role_id={self.role_id}, permission_id={self.permission_id}, "
            f"policy_id={self.policy_id}, inherit_policy={self.inherit_policy})>"
        )
