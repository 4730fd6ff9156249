from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.config import settings
from iam.database import get_db
from iam.dependencies import require
from iam.models.principal import Principal
from iam.models.user_tenant_role import UserTenantRole
from iam.routes.guards import MANAGE_USERS, TENANT_MEMBER
from iam.services.user_service import UserService
from iam.schemas.user_schemas import RoleGrantRequest, UserTenantRoleResponse

router = APIRouter()


def to_grant_response(grant: UserTenantRole) -> UserTenantRoleResponse:
    return UserTenantRoleResponse(
        user_id=grant.user_id,
        tenant_id=grant.tenant_id,
        role_id=grant.role_id,
        role_code=grant.role.code,
        created_at=grant.created_at,
    )


@router.get("/{tenant_id}/grants", response_model=list[UserTenantRoleResponse])
async def list_tenant_grants(
    tenant_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """List every role grant inside the tenant."""
    service = UserService(db)
    return [to_grant_response(g) for g in service.list_tenant_user_roles(tenant_id)]


@router.get("/{tenant_id}/users/{user_id}/roles", response_model=list[UserTenantRoleResponse])
async def list_user_roles(
    tenant_id: UUID,
    user_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """List the roles a user holds in the tenant."""
    service = UserService(db)
    return [to_grant_response(g) for g in service.list_user_roles(tenant_id, user_id)]


@router.post(
    "/{tenant_id}/users/{user_id}/roles",
    response_model=UserTenantRoleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def grant_role(
    tenant_id: UUID,
    user_id: UUID,
    grant: RoleGrantRequest,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Grant a role to a user in the tenant.

    - The role must belong to the tenant's landlord
    - Only a super-admin may grant the super-admin role
    - Returns 409 if the user already holds the role here
    """
    service = UserService(db)
    allow_reserved = principal.has_role(settings.SUPER_ADMIN_ROLE_CODE)
    created = service.grant_role(tenant_id, user_id, grant.role_id, allow_reserved=allow_reserved)
    return to_grant_response(created)


@router.delete("/{tenant_id}/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(
    tenant_id: UUID,
    user_id: UUID,
    role_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER, MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Revoke a role grant. Takes effect on the user's next request.

    - Only a super-admin may revoke the super-admin role
    """
    service = UserService(db)
    allow_reserved = principal.has_role(settings.SUPER_ADMIN_ROLE_CODE)
    service.revoke_role(tenant_id, user_id, role_id, allow_reserved=allow_reserved)
