import uuid

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any

from iam.models.policy import PolicyEffect


class PolicyCreate(BaseModel):
    """Create an ABAC policy in a tenant"""

    code: str = Field(..., min_length=2, max_length=100)
    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    effect: PolicyEffect = PolicyEffect.ALLOW
    actions: list[str] = Field(..., min_length=1, description="e.g. ['read', 'update']")
    resources: list[str] = Field(..., min_length=1, description="e.g. ['members']")
    conditions: dict[str, Any] = Field(
        default_factory=dict, description="Context attribute expectations, e.g. {'department': 'financial'}"
    )
    tenant_wide: bool = Field(
        default=False, description="Evaluate in every decision of the tenant, without role linkage"
    )


class PolicyUpdate(BaseModel):
    """Replace the mutable fields of a policy (code is immutable)"""

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    effect: PolicyEffect
    actions: list[str] = Field(..., min_length=1)
    resources: list[str] = Field(..., min_length=1)
    conditions: dict[str, Any] = Field(default_factory=dict)
    tenant_wide: bool = False


class PolicyResponse(BaseModel):
    """Policy details response"""

    id: uuid.UUID
    tenant_id: uuid.UUID
    code: str
    name: str
    description: str | None
    effect: PolicyEffect
    actions: list[str]
    resources: list[str]
    conditions: dict[str, Any]
    tenant_wide: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
