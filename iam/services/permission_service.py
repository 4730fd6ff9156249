import logging
import uuid

from sqlalchemy.orm import Session
from iam.models.permission import Permission
from iam.repositories.landlord_repository import LandlordRepository
from iam.repositories.permission_repository import PermissionRepository
from iam.repositories.policy_repository import PolicyRepository
from iam.repositories.role_permission_repository import RolePermissionRepository
from iam.schemas.role_schemas import PermissionCreate, PermissionUpdate
from iam.core.exceptions import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class PermissionService:
    """Service for landlord-scoped permissions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PermissionRepository(db)
        self.landlord_repo = LandlordRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.role_permission_repo = RolePermissionRepository(db)

    def _check_policy(self, landlord_id: uuid.UUID, policy_id: uuid.UUID) -> None:
        """The default policy must live in a tenant of the same landlord"""
        policy = self.policy_repo.get_by_id(policy_id)
        if not policy:
            raise NotFoundException(f"Policy {policy_id} not found")
        if policy.tenant.landlord_id != landlord_id:
            raise ValidationException("Policy does not belong to this landlord")

    def create_permission(self, landlord_id: uuid.UUID, data: PermissionCreate) -> Permission:
        """
        Create an (action, resource) permission, optionally with a default policy.

        Raises:
            NotFoundException: If the landlord or policy does not exist
            ValidationException: If the policy belongs to another landlord
            ConflictException: If (action, resource) already exists in the landlord
        """
        if not self.landlord_repo.get_by_id(landlord_id):
            raise NotFoundException("Landlord not found")

        action = data.action.strip()
        resource = data.resource.strip()
        if not action or not resource:
            raise ValidationException("Action and resource are required")

        if data.policy_id is not None:
            self._check_policy(landlord_id, data.policy_id)

        if self.repo.get_by_action_and_resource(landlord_id, action, resource):
            raise ConflictException(f"Permission {action}:{resource} already exists")

        permission = Permission(
            landlord_id=landlord_id,
            action=action,
            resource=resource,
            policy_id=data.policy_id,
        )
        return self.repo.create(permission)

    def list_permissions(self, landlord_id: uuid.UUID) -> list[Permission]:
        return self.repo.get_by_landlord(landlord_id)

    def get_permission(self, landlord_id: uuid.UUID, permission_id: uuid.UUID) -> Permission:
        """
        Get a permission ensuring it belongs to the landlord.

        Raises:
            NotFoundException: If permission not found in this landlord
        """
        permission = self.repo.get_by_id(permission_id)
        if not permission or permission.landlord_id != landlord_id:
            raise NotFoundException("Permission not found")
        return permission

    def update_permission(
        self, landlord_id: uuid.UUID, permission_id: uuid.UUID, data: PermissionUpdate
    ) -> Permission:
        """
        Partially update a permission.

        Changing the default policy changes the effective policy of every
        association that inherits it, from the next decision on. An explicit
        null policy_id removes the default.

        Raises:
            NotFoundException: If the permission or the new policy does not exist
            ValidationException: If nothing is given, a field is blank, or the
                policy belongs to another landlord
            ConflictException: If the new (action, resource) is already taken
        """
        permission = self.get_permission(landlord_id, permission_id)

        fields = data.model_fields_set
        if not fields:
            raise ValidationException("Nothing to update")

        action = data.action.strip() if data.action is not None else permission.action
        resource = data.resource.strip() if data.resource is not None else permission.resource
        if not action or not resource:
            raise ValidationException("Action and resource are required")

        if (action, resource) != (permission.action, permission.resource):
            existing = self.repo.get_by_action_and_resource(landlord_id, action, resource)
            if existing and existing.id != permission.id:
                raise ConflictException(f"Permission {action}:{resource} already exists")
            permission.action = action
            permission.resource = resource

        if "policy_id" in fields:
            if data.policy_id is not None:
                self._check_policy(landlord_id, data.policy_id)
            permission.policy_id = data.policy_id

        permission = self.repo.update(permission)
        logger.info("Updated permission %s:%s", permission.action, permission.resource)
        return permission

    def delete_permission(self, landlord_id: uuid.UUID, permission_id: uuid.UUID) -> None:
        """
        Delete a permission no role holds.

        Raises:
            NotFoundException: If permission not found in this landlord
            ConflictException: If the permission is still attached to roles
        """
        permission = self.get_permission(landlord_id, permission_id)

        attached = self.role_permission_repo.count_by_permission(permission_id)
        if attached:
            raise ConflictException(
                f"Permission {permission.action}:{permission.resource} is still attached to {attached} role(s)"
            )

        self.repo.delete(permission)
        logger.info("Deleted permission %s:%s", permission.action, permission.resource)
