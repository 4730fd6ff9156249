from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from iam.database import get_db
from iam.dependencies import get_current_principal, require
from iam.models.principal import Principal
from iam.routes.guards import TENANT_MEMBER
from iam.services.access_resolver import AccessResolver
from iam.schemas.access_schemas import (
    AccessDecisionRequest,
    AccessDecisionResponse,
    GrantedPermissionResponse,
)

router = APIRouter()


@router.post("/decide", response_model=AccessDecisionResponse)
async def decide(
    request: AccessDecisionRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Decide whether the caller may perform an action on a resource in a tenant.

    A denial is a normal 200 response with allowed=false; the reason names
    the deciding policy or the missing grant.
    """
    resolver = AccessResolver(db)
    decision = resolver.decide(
        principal.user_id, request.tenant_id, request.action, request.resource, request.context
    )
    return AccessDecisionResponse(
        allowed=decision.allowed,
        effect=decision.effect,
        reason=decision.reason,
        policy_code=decision.policy_code,
    )


@router.get("/tenants/{tenant_id}/permissions", response_model=list[GrantedPermissionResponse])
async def list_granted_permissions(
    tenant_id: UUID,
    principal: Principal = Depends(require(TENANT_MEMBER)),
    db: Session = Depends(get_db),
):
    """List what the caller's roles grant in the tenant and the governing policies."""
    resolver = AccessResolver(db)
    return resolver.granted_permissions(principal.user_id, tenant_id)
