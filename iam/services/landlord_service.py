import logging
import uuid

from sqlalchemy.orm import Session
from iam.models.landlord import Landlord
from iam.repositories.landlord_repository import LandlordRepository
from iam.repositories.permission_repository import PermissionRepository
from iam.repositories.role_repository import RoleRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.schemas.tenant_schemas import LandlordCreate
from iam.core.exceptions import ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class LandlordService:
    """Service for landlord lifecycle"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LandlordRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.role_repo = RoleRepository(db)
        self.permission_repo = PermissionRepository(db)

    def create_landlord(self, data: LandlordCreate) -> Landlord:
        """
        Create a landlord.

        Raises:
            ConflictException: If the name is already taken
        """
        name = data.name.strip()
        if self.repo.get_by_name(name):
            raise ConflictException(f"Landlord '{name}' already exists")

        landlord = Landlord(name=name, description=data.description, config=data.config)
        return self.repo.create(landlord)

    def list_landlords(self) -> list[Landlord]:
        return self.repo.get_all()

    def get_landlord(self, landlord_id: uuid.UUID) -> Landlord:
        """
        Get landlord by ID.

        Raises:
            NotFoundException: If landlord not found
        """
        landlord = self.repo.get_by_id(landlord_id)
        if not landlord:
            raise NotFoundException("Landlord not found")
        return landlord

    def delete_landlord(self, landlord_id: uuid.UUID) -> None:
        """
        Delete a landlord that owns nothing.

        Deletion does not cascade: a landlord with tenants, roles or
        permissions is rejected.

        Raises:
            NotFoundException: If landlord not found
            ConflictException: If dependents exist
        """
        landlord = self.get_landlord(landlord_id)

        dependents = {
            "tenants": self.tenant_repo.count_by_landlord(landlord_id),
            "roles": self.role_repo.count_by_landlord(landlord_id),
            "permissions": self.permission_repo.count_by_landlord(landlord_id),
        }
        remaining = {name: count for name, count in dependents.items() if count}
        if remaining:
            summary = ", ".join(f"{count} {name}" for name, count in remaining.items())
            raise ConflictException(f"Landlord still owns {summary}")

        self.repo.delete(landlord)
        logger.info("Deleted landlord %s", landlord_id)
