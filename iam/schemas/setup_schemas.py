import uuid

from pydantic import BaseModel, Field
from typing import Any

from iam.schemas.tenant_schemas import LandlordResponse, TenantResponse


class NetworkCreate(BaseModel):
    """Create a landlord with its primary tenant and the default access catalogue"""

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    first_tenant_name: str | None = Field(
        default=None, description="Extra branch created next to the primary tenant"
    )


class NetworkStatusResponse(BaseModel):
    """Counts of the access catalogue of a landlord"""

    landlord_id: uuid.UUID
    tenants_count: int
    roles_count: int
    permissions_count: int
    policies_count: int
    has_roles: bool
    has_permissions: bool
    has_policies: bool


class NetworkCreateResponse(BaseModel):
    """Result of the setup flow"""

    landlord: LandlordResponse
    primary_tenant: TenantResponse
    first_tenant: TenantResponse | None = None
    status: NetworkStatusResponse
