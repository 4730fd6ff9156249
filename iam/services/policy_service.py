import logging
import uuid

from sqlalchemy.orm import Session
from iam.models.policy import Policy
from iam.repositories.permission_repository import PermissionRepository
from iam.repositories.policy_repository import PolicyRepository
from iam.repositories.role_permission_repository import RolePermissionRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.schemas.policy_schemas import PolicyCreate, PolicyUpdate
from iam.core.exceptions import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


def _clean_list(values: list[str], field: str) -> list[str]:
    cleaned = [value.strip() for value in values or [] if value and value.strip()]
    if not cleaned:
        raise ValidationException(f"Policy {field} must not be empty")
    # keep first occurrence order
    return list(dict.fromkeys(cleaned))


class PolicyService:
    """Service for tenant-scoped ABAC policies"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PolicyRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.permission_repo = PermissionRepository(db)
        self.role_permission_repo = RolePermissionRepository(db)

    def create_policy(self, tenant_id: uuid.UUID, data: PolicyCreate) -> Policy:
        """
        Create a policy in a tenant.

        Raises:
            NotFoundException: If tenant not found
            ValidationException: If actions or resources are empty
            ConflictException: If code or name is already used in the tenant
        """
        if not self.tenant_repo.get_by_id(tenant_id):
            raise NotFoundException("Tenant not found")

        code = data.code.strip()
        name = data.name.strip()
        actions = _clean_list(data.actions, "actions")
        resources = _clean_list(data.resources, "resources")

        if self.repo.get_by_code(tenant_id, code):
            raise ConflictException(f"Policy code '{code}' is already used in this tenant")
        if self.repo.get_by_name(tenant_id, name):
            raise ConflictException(f"Policy name '{name}' is already used in this tenant")

        policy = Policy(
            tenant_id=tenant_id,
            code=code,
            name=name,
            description=data.description,
            effect=data.effect,
            actions=actions,
            resources=resources,
            conditions=data.conditions,
            tenant_wide=data.tenant_wide,
        )
        policy = self.repo.create(policy)
        logger.info("Created policy %s (%s) in tenant %s", policy.code, policy.effect.value, tenant_id)
        return policy

    def list_policies(self, tenant_id: uuid.UUID) -> list[Policy]:
        return self.repo.get_by_tenant(tenant_id)

    def get_policy(self, tenant_id: uuid.UUID, policy_id: uuid.UUID) -> Policy:
        """
        Get policy ensuring it belongs to the tenant.

        Raises:
            NotFoundException: If policy not found or belongs to another tenant
        """
        policy = self.repo.get_by_id_and_tenant(policy_id, tenant_id)
        if not policy:
            raise NotFoundException("Policy not found")
        return policy

    def update_policy(self, tenant_id: uuid.UUID, policy_id: uuid.UUID, data: PolicyUpdate) -> Policy:
        """
        Replace the mutable fields of a policy.

        Raises:
            NotFoundException: If policy not found
            ValidationException: If actions or resources are empty
            ConflictException: If the new name is used by another policy
        """
        policy = self.get_policy(tenant_id, policy_id)

        name = data.name.strip()
        clash = self.repo.get_by_name(tenant_id, name)
        if clash and clash.id != policy.id:
            raise ConflictException(f"Policy name '{name}' is already used in this tenant")

        policy.name = name
        policy.description = data.description
        policy.effect = data.effect
        policy.actions = _clean_list(data.actions, "actions")
        policy.resources = _clean_list(data.resources, "resources")
        policy.conditions = data.conditions
        policy.tenant_wide = data.tenant_wide
        return self.repo.update(policy)

    def delete_policy(self, tenant_id: uuid.UUID, policy_id: uuid.UUID) -> None:
        """
        Delete a policy nothing references.

        Raises:
            NotFoundException: If policy not found
            ConflictException: If a permission or role-permission still uses it
        """
        policy = self.get_policy(tenant_id, policy_id)

        if self.permission_repo.count_by_policy(policy_id) or self.role_permission_repo.count_by_policy(policy_id):
            raise ConflictException(
                f"Policy '{policy.code}' is still referenced by permissions or role-permissions"
            )

        self.repo.delete(policy)
        logger.info("Deleted policy %s from tenant %s", policy_id, tenant_id)
