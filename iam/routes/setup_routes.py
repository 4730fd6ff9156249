from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.database import get_db
from iam.dependencies import require
from iam.models.principal import Principal
from iam.routes.guards import SUPER_ADMIN_ONLY
from iam.services.setup_service import SetupService
from iam.schemas.setup_schemas import NetworkCreate, NetworkCreateResponse, NetworkStatusResponse
from iam.schemas.tenant_schemas import LandlordResponse, TenantResponse

router = APIRouter()


@router.post("/networks", response_model=NetworkCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_network(
    network: NetworkCreate,
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """
    Create a network: landlord, primary tenant and the default access catalogue.

    - **Requires SUPER_ADMIN**
    - Optionally adds a first branch tenant
    """
    service = SetupService(db)
    landlord, primary_tenant, first_tenant = service.create_network(network)
    return NetworkCreateResponse(
        landlord=LandlordResponse.model_validate(landlord),
        primary_tenant=TenantResponse.model_validate(primary_tenant),
        first_tenant=TenantResponse.model_validate(first_tenant) if first_tenant else None,
        status=service.network_status(landlord.id),
    )


@router.get("/networks/{landlord_id}/status", response_model=NetworkStatusResponse)
async def get_network_status(
    landlord_id: UUID,
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """Counts of tenants, roles, permissions and policies of a landlord."""
    service = SetupService(db)
    return service.network_status(landlord_id)


@router.post("/networks/{landlord_id}/defaults", response_model=NetworkStatusResponse)
async def install_defaults(
    landlord_id: UUID,
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """
    Re-sync the default catalogue of an existing landlord.

    Missing policies, permissions, roles and attachments are created;
    existing ones are left untouched.
    """
    service = SetupService(db)
    service.install_defaults(landlord_id)
    return service.network_status(landlord_id)
