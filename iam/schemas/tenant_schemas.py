import uuid

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any


class LandlordCreate(BaseModel):
    """Create a landlord"""

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class LandlordResponse(BaseModel):
    """Landlord details response"""

    id: uuid.UUID
    name: str
    description: str | None
    config: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantCreate(BaseModel):
    """Create a tenant under a landlord"""

    name: str = Field(..., min_length=1, max_length=255)
    config: dict[str, Any] = Field(default_factory=dict)


class TenantUpdate(BaseModel):
    """Update tenant details (all fields optional)"""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    config: dict[str, Any] | None = None


class TenantResponse(BaseModel):
    """Tenant details response"""

    id: uuid.UUID
    name: str
    config: dict[str, Any]
    landlord_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
