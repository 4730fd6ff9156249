"""
Authorization gate.

Protected operations declare a list of requirements; the gate evaluates
them in order against the current principal and the request parameters,
stopping at the first one that fails. On failure it raises
AccessDeniedException with a reason naming the unmet requirement; on
success it returns and the operation runs unchanged.

Requirement kinds:
- RoleRequirement: holds any (or all) of a set of role codes
- PermissionRequirement: passes the access resolver for action:resource
- TenantAccessRequirement: has a role in the tenant named by a parameter
- OwnershipOrRoleRequirement: is the subject user, or holds one of the roles
- SelfOnlyRequirement: is the subject user
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Union

from sqlalchemy.orm import Session

from iam.config import settings
from iam.models.principal import Principal
from iam.services.access_resolver import AccessResolver
from iam.core.exceptions import (
    AccessDeniedException,
    DataIntegrityError,
    UnauthorizedException,
    ValidationException,
)

logger = logging.getLogger(__name__)

ContextBuilder = Callable[[Mapping[str, Any]], Mapping[str, Any]]


@dataclass(frozen=True)
class RoleRequirement:
    """Principal must hold any (or, with require_all, every) role in ``roles``"""

    roles: tuple[str, ...]
    require_all: bool = False
    # when set, only roles of the landlord named by this parameter count
    landlord_param: str | None = None


@dataclass(frozen=True)
class PermissionRequirement:
    """Principal must be allowed ``action`` on ``resource`` in the parameter's tenant"""

    action: str
    resource: str
    tenant_param: str = "tenant_id"
    context: ContextBuilder | None = None

    @property
    def key(self) -> str:
        return f"{self.action}:{self.resource}"


@dataclass(frozen=True)
class TenantAccessRequirement:
    """Principal must have a role in the tenant named by ``tenant_param``"""

    tenant_param: str = "tenant_id"
    allow_super_admin: bool = True


@dataclass(frozen=True)
class OwnershipOrRoleRequirement:
    """Principal must be the user named by ``user_param`` or hold one of ``roles``"""

    user_param: str = "user_id"
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class SelfOnlyRequirement:
    """Principal must be the user named by ``user_param``"""

    user_param: str = "user_id"


Requirement = Union[
    RoleRequirement,
    PermissionRequirement,
    TenantAccessRequirement,
    OwnershipOrRoleRequirement,
    SelfOnlyRequirement,
]


def uuid_param(params: Mapping[str, Any], name: str) -> uuid.UUID:
    """
    Read a UUID-typed request parameter by name.

    Raises:
        ValidationException: If the parameter is missing or not a UUID
    """
    value = params.get(name)
    if value is None:
        raise ValidationException(f"Missing request parameter '{name}'")
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationException(f"Request parameter '{name}' is not a valid UUID")


class AuthorizationGate:
    """Evaluates declared requirements before a protected operation runs"""

    def __init__(
        self,
        db: Session,
        resolver: AccessResolver | None = None,
        super_admin_role_code: str | None = None,
    ):
        self.db = db
        self.super_admin_role_code = super_admin_role_code or settings.SUPER_ADMIN_ROLE_CODE
        self.resolver = resolver or AccessResolver(db, self.super_admin_role_code)
        self._checks = {
            RoleRequirement: self._check_role,
            PermissionRequirement: self._check_permission,
            TenantAccessRequirement: self._check_tenant_access,
            OwnershipOrRoleRequirement: self._check_ownership_or_role,
            SelfOnlyRequirement: self._check_self_only,
        }

    def enforce(
        self,
        principal: Principal | None,
        requirements: Sequence[Requirement],
        params: Mapping[str, Any],
    ) -> None:
        """
        Run requirements in declaration order, short-circuiting on failure.

        Args:
            principal: Authenticated principal (None when unauthenticated)
            requirements: Ordered requirement pipeline
            params: Request parameters (path and query) by name

        Raises:
            UnauthorizedException: If there is no principal
            AccessDeniedException: If a requirement is not met
            ValidationException: If a required UUID parameter is missing or malformed
        """
        if principal is None:
            raise UnauthorizedException("Authentication required")
        for requirement in requirements:
            self.check(principal, requirement, params)

    def check(self, principal: Principal, requirement: Requirement, params: Mapping[str, Any]) -> None:
        """Evaluate a single requirement"""
        check = self._checks.get(type(requirement))
        if check is None:
            raise TypeError(f"Unsupported requirement: {requirement!r}")
        check(principal, requirement, params)

    def _is_super_admin(self, principal: Principal) -> bool:
        return principal.has_role(self.super_admin_role_code)

    def _check_role(self, principal: Principal, requirement: RoleRequirement, params) -> None:
        if self._is_super_admin(principal):
            return

        landlord_id = None
        if requirement.landlord_param:
            landlord_id = uuid_param(params, requirement.landlord_param)
        held = principal.role_codes(landlord_id)

        if requirement.require_all:
            granted = all(role in held for role in requirement.roles)
        else:
            granted = any(role in held for role in requirement.roles)

        if not granted:
            mode = "all of" if requirement.require_all else "one of"
            raise AccessDeniedException(
                f"Access denied. Required roles ({mode}): {list(requirement.roles)}"
            )

    def _check_permission(self, principal: Principal, requirement: PermissionRequirement, params) -> None:
        tenant_id = uuid_param(params, requirement.tenant_param)
        context = dict(requirement.context(params)) if requirement.context else {}

        try:
            decision = self.resolver.decide(
                principal.user_id, tenant_id, requirement.action, requirement.resource, context
            )
        except DataIntegrityError:
            logger.exception(
                "Authorization fault for user=%s tenant=%s %s, failing closed",
                principal.user_id, tenant_id, requirement.key,
            )
            raise AccessDeniedException(f"Access denied. Required permissions: ['{requirement.key}']")

        if not decision.allowed:
            raise AccessDeniedException(
                f"Access denied. Required permissions: ['{requirement.key}'] ({decision.reason})"
            )

    def _check_tenant_access(self, principal: Principal, requirement: TenantAccessRequirement, params) -> None:
        tenant_id = uuid_param(params, requirement.tenant_param)
        if requirement.allow_super_admin and self._is_super_admin(principal):
            return
        if not principal.has_tenant(tenant_id):
            raise AccessDeniedException(f"Access denied to tenant: {tenant_id}")

    def _check_ownership_or_role(self, principal: Principal, requirement: OwnershipOrRoleRequirement, params) -> None:
        subject_id = uuid_param(params, requirement.user_param)
        if principal.user_id == subject_id:
            return
        if principal.role_codes() & set(requirement.roles):
            return
        raise AccessDeniedException(
            f"Access denied. Ownership violated; you can only access your own data "
            f"or hold one of the roles: {list(requirement.roles)}"
        )

    def _check_self_only(self, principal: Principal, requirement: SelfOnlyRequirement, params) -> None:
        subject_id = uuid_param(params, requirement.user_param)
        if principal.user_id != subject_id:
            raise AccessDeniedException(
                "Access denied. Ownership violated; you can only access your own data"
            )
