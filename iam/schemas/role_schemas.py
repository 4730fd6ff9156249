import uuid

from pydantic import BaseModel, Field
from datetime import datetime

from iam.services.role_permission_service import PolicySource


class RoleCreate(BaseModel):
    """Create a landlord-scoped role"""

    code: str = Field(..., min_length=2, max_length=100, description="Unique within the landlord")
    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None


class RoleUpdate(BaseModel):
    """Rename or re-describe a role. The code is immutable."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    description: str | None = None


class RoleResponse(BaseModel):
    """Role details response"""

    id: uuid.UUID
    landlord_id: uuid.UUID
    code: str
    name: str
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PermissionCreate(BaseModel):
    """Create a landlord-scoped permission"""

    action: str = Field(..., min_length=1, max_length=100, description="e.g. 'update'")
    resource: str = Field(..., min_length=1, max_length=100, description="e.g. 'members'")
    policy_id: uuid.UUID | None = Field(default=None, description="Default policy")


class PermissionUpdate(BaseModel):
    """
    Partial update of a permission.

    Only fields present in the request body are applied, so an explicit
    null policy_id clears the default policy.
    """

    action: str | None = Field(default=None, min_length=1, max_length=100)
    resource: str | None = Field(default=None, min_length=1, max_length=100)
    policy_id: uuid.UUID | None = None


class PermissionResponse(BaseModel):
    """Permission details response"""

    id: uuid.UUID
    landlord_id: uuid.UUID
    action: str
    resource: str
    policy_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RolePermissionAttach(BaseModel):
    """Attach a permission to a role"""

    permission_id: uuid.UUID
    policy_id: uuid.UUID | None = Field(default=None, description="Override policy")
    inherit_policy: bool = Field(
        default=True, description="Use the permission's default policy when no override"
    )


class RolePermissionPolicyUpdate(BaseModel):
    """Change the policy governing a role-permission association"""

    policy_id: uuid.UUID | None = None
    inherit_policy: bool = True


class RolePermissionResponse(BaseModel):
    """Role-permission association with its effective policy"""

    role_id: uuid.UUID
    permission_id: uuid.UUID
    action: str
    resource: str
    policy_id: uuid.UUID | None
    inherit_policy: bool
    effective_policy_id: uuid.UUID | None
    effective_policy_code: str | None
    policy_source: PolicySource
    created_at: datetime


class RolePermissionDetachResponse(BaseModel):
    """Response after detaching a permission"""

    detached: bool
