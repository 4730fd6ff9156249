import uuid

from pydantic import BaseModel, Field
from datetime import datetime


class UserCreate(BaseModel):
    """Register a user"""

    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8)


class UserResponse(BaseModel):
    """User details (never includes the password hash)"""

    id: uuid.UUID
    name: str
    email: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleGrantRequest(BaseModel):
    """Grant a role to a user inside a tenant"""

    role_id: uuid.UUID


class UserTenantRoleResponse(BaseModel):
    """A role a user holds in a tenant"""

    user_id: uuid.UUID
    tenant_id: uuid.UUID
    role_id: uuid.UUID
    role_code: str
    created_at: datetime


class UserTenantResponse(BaseModel):
    """A tenant the user belongs to with the role codes held there"""

    tenant_id: uuid.UUID
    tenant_name: str
    landlord_id: uuid.UUID
    roles: list[str]
