import uuid

from sqlalchemy import String, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.user_tenant_role import UserTenantRole


class User(Base, TimestampMixin):
    """
    Authenticated principal.

    Users are not tenant-scoped; tenant context comes only from
    UserTenantRole grants. The JWT 'sub' claim carries the user id.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    grants: Mapped[list["UserTenantRole"]] = relationship(
        "UserTenantRole",
        back_populates="user",
        cascade="all, delete-orphan",  # Drop grants if user deleted
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
