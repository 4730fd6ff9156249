from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.database import get_db
from iam.dependencies import require
from iam.models.principal import Principal
from iam.routes.guards import LANDLORD_ADMIN, SUPER_ADMIN_ONLY
from iam.services.landlord_service import LandlordService
from iam.services.tenant_service import TenantService
from iam.schemas.tenant_schemas import (
    LandlordCreate,
    LandlordResponse,
    TenantCreate,
    TenantResponse,
    TenantUpdate,
)

router = APIRouter()


@router.get("", response_model=list[LandlordResponse])
async def list_landlords(
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """List all landlords. **Requires SUPER_ADMIN**"""
    service = LandlordService(db)
    return service.list_landlords()


@router.post("", response_model=LandlordResponse, status_code=status.HTTP_201_CREATED)
async def create_landlord(
    landlord: LandlordCreate,
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """
    Create a landlord without any catalogue.

    Use POST /api/setup/networks to get the default roles and policies.
    """
    service = LandlordService(db)
    return service.create_landlord(landlord)


@router.delete("/{landlord_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_landlord(
    landlord_id: UUID,
    principal: Principal = Depends(require(SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    """
    Delete an empty landlord.

    Returns 409 while the landlord still owns tenants, roles or permissions.
    """
    service = LandlordService(db)
    service.delete_landlord(landlord_id)


@router.get("/{landlord_id}/tenants", response_model=list[TenantResponse])
async def list_tenants(
    landlord_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """List the tenants of a landlord."""
    service = TenantService(db)
    return service.list_tenants(landlord_id)


@router.post("/{landlord_id}/tenants", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    landlord_id: UUID,
    tenant: TenantCreate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """Add a tenant (branch) to a landlord."""
    service = TenantService(db)
    return service.create_tenant(landlord_id, tenant)


@router.get("/{landlord_id}/tenants/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    landlord_id: UUID,
    tenant_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """Get one tenant of a landlord."""
    service = TenantService(db)
    return service.get_landlord_tenant(landlord_id, tenant_id)


@router.patch("/{landlord_id}/tenants/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    landlord_id: UUID,
    tenant_id: UUID,
    tenant_update: TenantUpdate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Update a tenant.

    - **name**: new display name
    - **config**: keys merged into the stored config
    """
    service = TenantService(db)
    return service.update_tenant(landlord_id, tenant_id, tenant_update)
