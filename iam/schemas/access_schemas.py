import uuid

from pydantic import BaseModel, Field
from typing import Any

from iam.models.policy import PolicyEffect
from iam.services.role_permission_service import PolicySource


class AccessDecisionRequest(BaseModel):
    """Ask whether the caller may perform an action on a resource"""

    tenant_id: uuid.UUID
    action: str = Field(..., min_length=1)
    resource: str = Field(..., min_length=1)
    context: dict[str, Any] = Field(default_factory=dict, description="Request attributes for policy conditions")


class AccessDecisionResponse(BaseModel):
    """Authorization decision"""

    allowed: bool
    effect: PolicyEffect
    reason: str
    policy_code: str | None = None


class GrantedPermissionResponse(BaseModel):
    """A permission held in a tenant through a role"""

    role_code: str
    action: str
    resource: str
    policy_code: str | None
    effect: str | None
    source: PolicySource

    model_config = {"from_attributes": True}
