from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from iam.core.security import extract_user_id
from iam.core.exceptions import UnauthorizedException
from iam.database import get_db
from iam.models.principal import Principal
from iam.repositories.user_repository import UserRepository
from iam.repositories.user_tenant_role_repository import UserTenantRoleRepository
from iam.services.authorization_gate import AuthorizationGate, Requirement

# auto_error disabled so a missing or non-Bearer header is a 401 from our handler
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    """
    FastAPI dependency to validate JWT and build the request principal.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Read the user UUID from the 'sub' claim
    4. Load the active user and all of their tenant role grants
    5. Return the Principal for the gate and the endpoint

    Raises:
        UnauthorizedException: If the token is missing, invalid or names an unknown/inactive user
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    user_id = extract_user_id(credentials.credentials)

    user = UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise UnauthorizedException("User not found or inactive")

    grants = UserTenantRoleRepository(db).get_user_grants(user.id)
    return Principal(user=user, grants=grants)


def require(*requirements: Requirement):
    """
    Build a dependency that enforces requirements before the endpoint runs.

    Path and query parameters are exposed to the requirements by name.

    Usage:
        @router.get("/{tenant_id}/policies")
        async def list_policies(
            tenant_id: UUID,
            principal: Principal = Depends(require(TenantAccessRequirement())),
        ): ...
    """

    async def enforce_requirements(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> Principal:
        params = {**request.query_params, **request.path_params}
        AuthorizationGate(db).enforce(principal, requirements, params)
        return principal

    return enforce_requirements
