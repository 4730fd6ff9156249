"""
Access decision orchestration.

Answers "can user U perform action A on resource R in tenant T given
context C?" by combining the user's tenant roles, the effective
permissions of those roles and policy evaluation.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.orm import Session

from iam.config import settings
from iam.models.user import User
from iam.repositories.policy_repository import PolicyRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.repositories.user_repository import UserRepository
from iam.repositories.user_tenant_role_repository import UserTenantRoleRepository
from iam.services.policy_evaluator import Decision, PolicyRule, evaluate
from iam.services.role_permission_service import PolicySource, RolePermissionService
from iam.core.exceptions import UnauthorizedException, ValidationException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrantedPermission:
    """One permission a user holds in a tenant, through one role"""

    role_code: str
    action: str
    resource: str
    policy_code: str | None
    effect: str | None
    source: PolicySource


class AccessResolver:
    """
    Orchestrates authorization decisions.

    Stateless apart from the session: every call reads the grants,
    associations and policies as they are stored at that moment.
    """

    def __init__(self, db: Session, super_admin_role_code: str | None = None):
        self.db = db
        self.super_admin_role_code = super_admin_role_code or settings.SUPER_ADMIN_ROLE_CODE
        self.user_repo = UserRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.grant_repo = UserTenantRoleRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.role_permissions = RolePermissionService(db)

    def is_super_admin(self, user_id: uuid.UUID) -> bool:
        """Check if the user holds the reserved super-admin role in any tenant"""
        return self.grant_repo.user_has_role_code(user_id, self.super_admin_role_code)

    def decide(
        self,
        user_id: uuid.UUID,
        tenant_id: uuid.UUID,
        action: str,
        resource: str,
        context: Mapping[str, Any] | None = None,
    ) -> Decision:
        """
        Decide whether the user may perform the action on the resource.

        Flow:
        1. Super-admin holders are allowed unconditionally (privileged path)
        2. No role in the tenant -> DENY
        3. Collect the effective policies of permissions matching (action, resource);
           associations without policy count as DENY
        4. Add the tenant's tenant-wide policies
        5. Evaluate (explicit deny wins, default deny)

        Args:
            user_id: Principal
            tenant_id: Tenant the request targets
            action: Requested action
            resource: Requested resource
            context: Request attributes for policy conditions

        Returns:
            Decision; DENY is a normal return value

        Raises:
            UnauthorizedException: If the user does not exist or is inactive
            ValidationException: If the tenant does not exist
            DataIntegrityError: If stored associations reference missing rows
        """
        self._require_user(user_id)
        if not self.tenant_repo.get_by_id(tenant_id):
            raise ValidationException(f"Tenant {tenant_id} not found")

        if self.is_super_admin(user_id):
            logger.warning(
                "Privileged super-admin bypass: user=%s tenant=%s action=%s resource=%s",
                user_id, tenant_id, action, resource,
            )
            return Decision.allow(f"Super-admin role '{self.super_admin_role_code}' bypass")

        roles = self.grant_repo.get_roles(user_id, tenant_id)
        if not roles:
            decision = Decision.deny("No role in tenant")
            self._log_decision(user_id, tenant_id, action, resource, decision)
            return decision

        rules: list[PolicyRule] = []
        seen: set[tuple] = set()
        for role in roles:
            for granted in self.role_permissions.resolve_effective_permissions(role.id):
                permission = granted.permission
                if permission.action != action or permission.resource != resource:
                    continue
                if granted.key in seen:
                    continue
                seen.add(granted.key)
                if granted.policy is None:
                    rules.append(PolicyRule.implicit_deny(action, resource))
                else:
                    rules.append(PolicyRule.from_policy(granted.policy))

        rules.extend(
            PolicyRule.from_policy(policy) for policy in self.policy_repo.get_tenant_wide(tenant_id)
        )

        decision = evaluate(rules, action, resource, context)
        self._log_decision(user_id, tenant_id, action, resource, decision)
        return decision

    def granted_permissions(self, user_id: uuid.UUID, tenant_id: uuid.UUID) -> list[GrantedPermission]:
        """
        List what the user's roles grant in a tenant, with governing policies.

        Raises:
            UnauthorizedException: If the user does not exist or is inactive
            ValidationException: If the tenant does not exist
        """
        self._require_user(user_id)
        if not self.tenant_repo.get_by_id(tenant_id):
            raise ValidationException(f"Tenant {tenant_id} not found")

        result = []
        for role in self.grant_repo.get_roles(user_id, tenant_id):
            for granted in self.role_permissions.resolve_effective_permissions(role.id):
                policy = granted.policy
                result.append(
                    GrantedPermission(
                        role_code=role.code,
                        action=granted.permission.action,
                        resource=granted.permission.resource,
                        policy_code=policy.code if policy else None,
                        effect=policy.effect.value if policy else None,
                        source=granted.source,
                    )
                )
        return result

    def _require_user(self, user_id: uuid.UUID) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise UnauthorizedException("Unknown or inactive user")
        return user

    @staticmethod
    def _log_decision(user_id, tenant_id, action, resource, decision: Decision) -> None:
        logger.debug(
            "Access %s: user=%s tenant=%s %s:%s (%s)",
            decision.effect.value, user_id, tenant_id, action, resource, decision.reason,
        )
