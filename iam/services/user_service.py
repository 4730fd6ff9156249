import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from iam.config import settings
from iam.core.security import hash_password
from iam.models.user import User
from iam.models.user_tenant_role import UserTenantRole
from iam.repositories.role_repository import RoleRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.repositories.user_repository import UserRepository
from iam.repositories.user_tenant_role_repository import UserTenantRoleRepository
from iam.schemas.user_schemas import UserCreate, UserTenantResponse
from iam.core.exceptions import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class UserService:
    """Service for users and their per-tenant role grants"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.role_repo = RoleRepository(db)
        self.grant_repo = UserTenantRoleRepository(db)

    def create_user(self, data: UserCreate) -> User:
        """
        Register a user.

        Raises:
            ConflictException: If the email is already registered
        """
        email = data.email.strip().lower()
        if self.user_repo.get_by_email(email):
            raise ConflictException(f"User with email {email} already exists")

        user = User(
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
        )
        return self.user_repo.create(user)

    def get_user(self, user_id: uuid.UUID) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    def list_user_tenants(self, user_id: uuid.UUID) -> list[UserTenantResponse]:
        """
        List the tenants a user holds at least one role in.

        Returns:
            One entry per tenant with the role codes held there, sorted by tenant name
        """
        self.get_user(user_id)

        by_tenant: dict[uuid.UUID, UserTenantResponse] = {}
        for grant in self.grant_repo.get_user_grants(user_id):
            entry = by_tenant.get(grant.tenant_id)
            if entry is None:
                entry = UserTenantResponse(
                    tenant_id=grant.tenant_id,
                    tenant_name=grant.tenant.name,
                    landlord_id=grant.tenant.landlord_id,
                    roles=[],
                )
                by_tenant[grant.tenant_id] = entry
            if grant.role.code not in entry.roles:
                entry.roles.append(grant.role.code)

        for entry in by_tenant.values():
            entry.roles.sort()
        return sorted(by_tenant.values(), key=lambda e: e.tenant_name)

    def grant_role(
        self,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        role_id: uuid.UUID,
        allow_reserved: bool = False,
    ) -> UserTenantRole:
        """
        Grant a role to a user inside a tenant.

        The role must belong to the tenant's landlord. Granting the
        super-admin role needs allow_reserved, which callers set only when
        the acting principal is super-admin.

        Raises:
            NotFoundException: If tenant, user or role does not exist
            ValidationException: If the role belongs to another landlord or is reserved
            ConflictException: If the grant already exists
        """
        tenant = self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundException("Tenant not found")
        self.get_user(user_id)
        role = self.role_repo.get_by_id(role_id)
        if not role:
            raise NotFoundException("Role not found")

        if role.landlord_id != tenant.landlord_id:
            raise ValidationException("Role does not belong to the tenant's landlord")
        if role.code == settings.SUPER_ADMIN_ROLE_CODE and not allow_reserved:
            raise ValidationException(f"Only a super-admin may grant '{role.code}'")

        if self.grant_repo.get(user_id, tenant_id, role_id):
            raise ConflictException(f"User already holds role '{role.code}' in this tenant")

        try:
            grant = self.grant_repo.create(
                UserTenantRole(user_id=user_id, tenant_id=tenant_id, role_id=role_id)
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"User already holds role '{role.code}' in this tenant")

        logger.info("Granted role %s to user %s in tenant %s", role.code, user_id, tenant_id)
        return grant

    def revoke_role(
        self,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        role_id: uuid.UUID,
        allow_reserved: bool = False,
    ) -> None:
        """
        Revoke a grant.

        Revoking the super-admin role needs allow_reserved, same as granting it.

        Raises:
            NotFoundException: If the user does not hold the role in this tenant
            ValidationException: If the role is reserved and allow_reserved is not set
        """
        grant = self.grant_repo.get(user_id, tenant_id, role_id)
        if not grant:
            raise NotFoundException("Role grant not found")
        if grant.role.code == settings.SUPER_ADMIN_ROLE_CODE and not allow_reserved:
            raise ValidationException(f"Only a super-admin may revoke '{grant.role.code}'")
        self.grant_repo.delete(grant)
        logger.info("Revoked role %s from user %s in tenant %s", role_id, user_id, tenant_id)

    def list_user_roles(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> list[UserTenantRole]:
        """List the grants a user holds in one tenant"""
        return [g for g in self.grant_repo.get_user_grants(user_id) if g.tenant_id == tenant_id]

    def list_tenant_user_roles(self, tenant_id: uuid.UUID) -> list[UserTenantRole]:
        if not self.tenant_repo.get_by_id(tenant_id):
            raise NotFoundException("Tenant not found")
        return self.grant_repo.get_tenant_grants(tenant_id)
