import uuid

from sqlalchemy.orm import Session
from iam.models.tenant import Tenant
from iam.repositories.landlord_repository import LandlordRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.schemas.tenant_schemas import TenantCreate, TenantUpdate
from iam.core.exceptions import NotFoundException


class TenantService:
    """Service layer for tenant management"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.landlord_repo = LandlordRepository(db)

    def create_tenant(self, landlord_id: uuid.UUID, data: TenantCreate) -> Tenant:
        """
        Create a tenant under a landlord.

        Args:
            landlord_id: Owning landlord
            data: Tenant name and config

        Returns:
            Created tenant

        Raises:
            NotFoundException: If the landlord does not exist
        """
        if not self.landlord_repo.get_by_id(landlord_id):
            raise NotFoundException("Landlord not found")

        tenant = Tenant(name=data.name.strip(), config=data.config, landlord_id=landlord_id)
        return self.tenant_repo.create(tenant)

    def list_tenants(self, landlord_id: uuid.UUID) -> list[Tenant]:
        """List all tenants of a landlord"""
        if not self.landlord_repo.get_by_id(landlord_id):
            raise NotFoundException("Landlord not found")
        return self.tenant_repo.get_by_landlord(landlord_id)

    def get_tenant(self, tenant_id: uuid.UUID) -> Tenant:
        """
        Get tenant details.

        Raises:
            NotFoundException: If tenant not found
        """
        tenant = self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundException("Tenant not found")
        return tenant

    def get_landlord_tenant(self, landlord_id: uuid.UUID, tenant_id: uuid.UUID) -> Tenant:
        """
        Get a tenant ensuring it belongs to the landlord.

        Raises:
            NotFoundException: If tenant not found in this landlord
        """
        tenant = self.get_tenant(tenant_id)
        if tenant.landlord_id != landlord_id:
            raise NotFoundException("Tenant not found")
        return tenant

    def update_tenant(self, landlord_id: uuid.UUID, tenant_id: uuid.UUID, data: TenantUpdate) -> Tenant:
        """
        Update tenant name and/or config.

        Config keys are merged into the stored config, so flags set by the
        setup flow (e.g. is_primary_tenant) survive.
        """
        tenant = self.get_landlord_tenant(landlord_id, tenant_id)

        if data.name is not None:
            tenant.name = data.name.strip()
        if data.config is not None:
            tenant.config = {**tenant.config, **data.config}

        return self.tenant_repo.update(tenant)
