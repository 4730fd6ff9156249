"""Landlord model: top-level owner of tenants, roles and permissions."""

import uuid

from sqlalchemy import String, Text, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from iam.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from iam.models.tenant import Tenant
    from iam.models.role import Role
    from iam.models.permission import Permission


class Landlord(Base, TimestampMixin):
    """
    Top-level owner grouping tenants, roles and permissions.

    Examples:
    - "Iron Fist Network" - a franchise network of gyms
    - "Acme Holdings" - a company with several branches

    Roles and permissions are landlord-scoped, never global. Deleting a
    landlord that still owns tenants, roles or permissions is rejected at
    the service layer.
    """

    __tablename__ = "landlords"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Relationships
    tenants: Mapped[list["Tenant"]] = relationship("Tenant", back_populates="landlord")
    roles: Mapped[list["Role"]] = relationship("Role", back_populates="landlord")
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission", back_populates="landlord"
    )

    def __repr__(self) -> str:
        return f"<Landlord(id={self.id}, name='{self.name}')>"
