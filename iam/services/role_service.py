import logging
import uuid

from sqlalchemy.orm import Session
from iam.config import settings
from iam.models.role import Role
from iam.repositories.landlord_repository import LandlordRepository
from iam.repositories.role_repository import RoleRepository
from iam.repositories.user_tenant_role_repository import UserTenantRoleRepository
from iam.schemas.role_schemas import RoleCreate, RoleUpdate
from iam.core.exceptions import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class RoleService:
    """Service for landlord-scoped roles"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoleRepository(db)
        self.landlord_repo = LandlordRepository(db)
        self.grant_repo = UserTenantRoleRepository(db)

    def create_role(self, landlord_id: uuid.UUID, data: RoleCreate, allow_reserved: bool = False) -> Role:
        """
        Create a role in a landlord.

        The super-admin code is reserved; only callers that already hold
        super-admin may create a role with it (allow_reserved).

        Raises:
            NotFoundException: If the landlord does not exist
            ValidationException: If the code is reserved
            ConflictException: If the code already exists in the landlord
        """
        if not self.landlord_repo.get_by_id(landlord_id):
            raise NotFoundException("Landlord not found")

        code = data.code.strip()
        if code == settings.SUPER_ADMIN_ROLE_CODE and not allow_reserved:
            raise ValidationException(f"Role code '{code}' is reserved")
        if self.repo.get_by_code(landlord_id, code):
            raise ConflictException(f"Role '{code}' already exists in this landlord")

        role = Role(
            landlord_id=landlord_id,
            code=code,
            name=data.name.strip(),
            description=data.description,
        )
        return self.repo.create(role)

    def list_roles(self, landlord_id: uuid.UUID) -> list[Role]:
        return self.repo.get_by_landlord(landlord_id)

    def get_role(self, landlord_id: uuid.UUID, role_id: uuid.UUID) -> Role:
        """
        Get a role ensuring it belongs to the landlord.

        Raises:
            NotFoundException: If role not found in this landlord
        """
        role = self.repo.get_by_id(role_id)
        if not role or role.landlord_id != landlord_id:
            raise NotFoundException("Role not found")
        return role

    def update_role(self, landlord_id: uuid.UUID, role_id: uuid.UUID, data: RoleUpdate) -> Role:
        """Update role name and description"""
        role = self.get_role(landlord_id, role_id)

        if data.name is not None:
            role.name = data.name.strip()
        if data.description is not None:
            role.description = data.description

        return self.repo.update(role)

    def delete_role(self, landlord_id: uuid.UUID, role_id: uuid.UUID, allow_reserved: bool = False) -> None:
        """
        Delete a role that nobody holds.

        Its role-permission associations are removed with it.

        Raises:
            NotFoundException: If role not found in this landlord
            ValidationException: If the role is reserved and allow_reserved is not set
            ConflictException: If the role is still granted to users
        """
        role = self.get_role(landlord_id, role_id)
        if role.code == settings.SUPER_ADMIN_ROLE_CODE and not allow_reserved:
            raise ValidationException(f"Only a super-admin may delete '{role.code}'")

        grants = self.grant_repo.count_by_role(role_id)
        if grants:
            raise ConflictException(f"Role '{role.code}' is still granted {grants} time(s)")

        self.repo.delete(role)
        logger.info("Deleted role %s of landlord %s", role.code, landlord_id)
