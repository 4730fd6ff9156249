from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.config import settings
from iam.database import get_db
from iam.dependencies import require
from iam.models.principal import Principal
from iam.models.role_permission import RolePermission
from iam.routes.guards import LANDLORD_ADMIN
from iam.services.permission_service import PermissionService
from iam.services.role_permission_service import RolePermissionService, effective_policy_of
from iam.services.role_service import RoleService
from iam.schemas.role_schemas import (
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
    RolePermissionAttach,
    RolePermissionDetachResponse,
    RolePermissionPolicyUpdate,
    RolePermissionResponse,
)

router = APIRouter()


def to_role_permission_response(association: RolePermission) -> RolePermissionResponse:
    policy, source = effective_policy_of(association)
    return RolePermissionResponse(
        role_id=association.role_id,
        permission_id=association.permission_id,
        action=association.permission.action,
        resource=association.permission.resource,
        policy_id=association.policy_id,
        inherit_policy=association.inherit_policy,
        effective_policy_id=policy.id if policy else None,
        effective_policy_code=policy.code if policy else None,
        policy_source=source,
        created_at=association.created_at,
    )


@router.get("/{landlord_id}/roles", response_model=list[RoleResponse])
async def list_roles(
    landlord_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """List the roles of a landlord."""
    service = RoleService(db)
    return service.list_roles(landlord_id)


@router.post("/{landlord_id}/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    landlord_id: UUID,
    role: RoleCreate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Create a role in a landlord.

    - Role codes are unique per landlord
    - The super-admin code can only be created by a super-admin
    """
    service = RoleService(db)
    allow_reserved = principal.has_role(settings.SUPER_ADMIN_ROLE_CODE)
    return service.create_role(landlord_id, role, allow_reserved=allow_reserved)


@router.put("/{landlord_id}/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    landlord_id: UUID,
    role_id: UUID,
    role_update: RoleUpdate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """Update role name and description. The code cannot change."""
    service = RoleService(db)
    return service.update_role(landlord_id, role_id, role_update)


@router.delete("/{landlord_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    landlord_id: UUID,
    role_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Delete a role and its permission associations.

    - Returns 409 while the role is granted to any user
    - Only a super-admin may delete the super-admin role
    """
    service = RoleService(db)
    allow_reserved = principal.has_role(settings.SUPER_ADMIN_ROLE_CODE)
    service.delete_role(landlord_id, role_id, allow_reserved=allow_reserved)


@router.get("/{landlord_id}/permissions", response_model=list[PermissionResponse])
async def list_permissions(
    landlord_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """List the permissions of a landlord."""
    service = PermissionService(db)
    return service.list_permissions(landlord_id)


@router.post("/{landlord_id}/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    landlord_id: UUID,
    permission: PermissionCreate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Create an (action, resource) permission.

    The optional default policy must belong to a tenant of the same landlord.
    """
    service = PermissionService(db)
    return service.create_permission(landlord_id, permission)


@router.patch("/{landlord_id}/permissions/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    landlord_id: UUID,
    permission_id: UUID,
    permission_update: PermissionUpdate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Partially update a permission.

    - **action** / **resource**: rename; 409 if the pair is taken
    - **policy_id**: new default policy, or null to remove it. Roles that
      inherit the permission's policy follow the change.
    """
    service = PermissionService(db)
    return service.update_permission(landlord_id, permission_id, permission_update)


@router.delete("/{landlord_id}/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    landlord_id: UUID,
    permission_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """Delete a permission. Returns 409 while any role holds it."""
    service = PermissionService(db)
    service.delete_permission(landlord_id, permission_id)


@router.get("/{landlord_id}/roles/{role_id}/permissions", response_model=list[RolePermissionResponse])
async def list_role_permissions(
    landlord_id: UUID,
    role_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """List the permissions of a role with their effective policies."""
    RoleService(db).get_role(landlord_id, role_id)
    service = RolePermissionService(db)
    return [to_role_permission_response(a) for a in service.list_role_permissions(role_id)]


@router.post(
    "/{landlord_id}/roles/{role_id}/permissions",
    response_model=RolePermissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def attach_permission(
    landlord_id: UUID,
    role_id: UUID,
    attach: RolePermissionAttach,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Attach a permission to a role.

    - **policy_id**: optional override policy
    - **inherit_policy**: use the permission's default policy when no override
    - Returns 409 if the role already holds the permission
    """
    RoleService(db).get_role(landlord_id, role_id)
    service = RolePermissionService(db)
    association = service.attach_permission(
        role_id, attach.permission_id, attach.policy_id, attach.inherit_policy
    )
    return to_role_permission_response(association)


@router.put("/{landlord_id}/roles/{role_id}/permissions/{permission_id}", response_model=RolePermissionResponse)
async def update_role_permission_policy(
    landlord_id: UUID,
    role_id: UUID,
    permission_id: UUID,
    update: RolePermissionPolicyUpdate,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """Change the override policy and inheritance flag of an association."""
    RoleService(db).get_role(landlord_id, role_id)
    service = RolePermissionService(db)
    association = service.update_policy(role_id, permission_id, update.policy_id, update.inherit_policy)
    return to_role_permission_response(association)


@router.delete(
    "/{landlord_id}/roles/{role_id}/permissions/{permission_id}",
    response_model=RolePermissionDetachResponse,
)
async def detach_permission(
    landlord_id: UUID,
    role_id: UUID,
    permission_id: UUID,
    principal: Principal = Depends(require(LANDLORD_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Detach a permission from a role.

    Idempotent: returns detached=false when the role did not hold it.
    """
    RoleService(db).get_role(landlord_id, role_id)
    service = RolePermissionService(db)
    return RolePermissionDetachResponse(detached=service.detach_permission(role_id, permission_id))
