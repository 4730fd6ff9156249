from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from iam.database import get_db
from iam.dependencies import get_current_principal, require
from iam.models.principal import Principal
from iam.routes.guards import ANY_ADMIN, OWNER_OR_ADMIN, SELF_ONLY
from iam.services.user_service import UserService
from iam.schemas.user_schemas import UserCreate, UserResponse, UserTenantResponse

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    principal: Principal = Depends(require(ANY_ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Register a user.

    - **Requires SUPER_ADMIN or admin**
    - Email is stored lower-cased and must be unique
    """
    service = UserService(db)
    return service.create_user(user)


@router.get("/me", response_model=UserResponse)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """Get the authenticated user."""
    return principal.user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    principal: Principal = Depends(require(OWNER_OR_ADMIN)),
    db: Session = Depends(get_db),
):
    """Get a user. Allowed for the user themselves or an admin."""
    service = UserService(db)
    return service.get_user(user_id)


@router.get("/{user_id}/tenants", response_model=list[UserTenantResponse])
async def list_user_tenants(
    user_id: UUID,
    principal: Principal = Depends(require(SELF_ONLY)),
    db: Session = Depends(get_db),
):
    """
    List the tenants a user belongs to with the roles held in each.

    Only the user themselves may call this.
    """
    service = UserService(db)
    return service.list_user_tenants(user_id)
