from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.database import get_db
from iam.dependencies import require
from iam.models.principal import Principal
from iam.routes.guards import MANAGE_POLICIES, TENANT_MEMBER
from iam.services.policy_service import PolicyService
from iam.schemas.policy_schemas import PolicyCreate, PolicyResponse, PolicyUpdate

router = APIRouter()


@router.get("/{tenant_id}/policies", response_model=list[PolicyResponse])
async def list_policies(
    tenant_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_POLICIES)),
    db: Session = Depends(get_db),
):
    """List the policies of a tenant."""
    service = PolicyService(db)
    return service.list_policies(tenant_id)


@router.post("/{tenant_id}/policies", response_model=PolicyResponse, status_code=status.HTTP_201_CREATED)
async def create_policy(
    tenant_id: UUID,
    policy: PolicyCreate,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_POLICIES)),
    db: Session = Depends(get_db),
):
    """
    Create a policy.

    - **effect**: allow or deny
    - **actions** / **resources**: non-empty lists the policy applies to
    - **conditions**: context attributes that must match, plain values or
      operator maps such as {"$in": [...]}
    - **tenant_wide**: evaluated in every decision of the tenant
    """
    service = PolicyService(db)
    return service.create_policy(tenant_id, policy)


@router.get("/{tenant_id}/policies/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    tenant_id: UUID,
    policy_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_POLICIES)),
    db: Session = Depends(get_db),
):
    """Get a policy of the tenant."""
    service = PolicyService(db)
    return service.get_policy(tenant_id, policy_id)


@router.put("/{tenant_id}/policies/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    tenant_id: UUID,
    policy_id: UUID,
    policy: PolicyUpdate,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_POLICIES)),
    db: Session = Depends(get_db),
):
    """
    Replace the mutable fields of a policy.

    Changes apply to the next decision; nothing is cached.
    """
    service = PolicyService(db)
    return service.update_policy(tenant_id, policy_id, policy)


@router.delete("/{tenant_id}/policies/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_policy(
    tenant_id: UUID,
    policy_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_POLICIES)),
    db: Session = Depends(get_db),
):
    """
    Delete a policy.

    Returns 409 while a permission or role-permission still references it.
    """
    service = PolicyService(db)
    service.delete_policy(tenant_id, policy_id)
