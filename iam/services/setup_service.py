"""
Network bootstrap.

A network is a landlord with its primary tenant and the default access
catalogue (policies, permissions, roles) a new academy network starts with.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from iam.models.landlord import Landlord
from iam.models.permission import Permission
from iam.models.policy import Policy, PolicyEffect
from iam.models.role import Role
from iam.models.role_permission import RolePermission
from iam.models.tenant import Tenant
from iam.repositories.landlord_repository import LandlordRepository
from iam.repositories.permission_repository import PermissionRepository
from iam.repositories.policy_repository import PolicyRepository
from iam.repositories.role_permission_repository import RolePermissionRepository
from iam.repositories.role_repository import RoleRepository
from iam.repositories.tenant_repository import TenantRepository
from iam.schemas.setup_schemas import NetworkCreate, NetworkStatusResponse
from iam.core.exceptions import ConflictException, NotFoundException

logger = logging.getLogger(__name__)

PRIMARY_TENANT_FLAG = "is_primary_tenant"
PRIMARY_TENANT_SUFFIX = " HQ"

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_CURRENCY = "BRL"

DEFAULT_POLICIES: dict[str, dict[str, Any]] = {
    "admin_full_access": {
        "name": "Admin Full Access",
        "description": "Full administrative access to the network",
        "actions": ["create", "read", "update", "delete", "manage"],
        "resources": [
            "users", "roles", "permissions", "policies", "members",
            "classes", "payments", "reports", "settings", "equipment",
        ],
        "conditions": {},
    },
    "instructor_access": {
        "name": "Instructor Access",
        "description": "Class and student progress management",
        "actions": ["read", "update", "create", "manage"],
        "resources": ["members", "classes", "attendance", "progress", "competitions"],
        "conditions": {},
    },
    "financial_access": {
        "name": "Financial Access",
        "description": "Payments and financial reports, financial department only",
        "actions": ["read", "create", "update"],
        "resources": ["payments", "invoices", "financial_reports", "members"],
        "conditions": {"department": "financial"},
    },
    "reception_access": {
        "name": "Reception Access",
        "description": "Front desk member and schedule handling",
        "actions": ["create", "read", "update"],
        "resources": ["members", "classes", "schedule", "basic_reports", "equipment", "competitions"],
        "conditions": {},
    },
}

# (action, resource) -> default policy code
DEFAULT_PERMISSIONS: dict[tuple[str, str], str] = {
    ("manage", "users"): "admin_full_access",
    ("manage", "roles"): "admin_full_access",
    ("manage", "permissions"): "admin_full_access",
    ("manage", "policies"): "admin_full_access",
    ("manage", "settings"): "admin_full_access",
    ("create", "members"): "reception_access",
    ("read", "members"): "reception_access",
    ("update", "members"): "instructor_access",
    ("delete", "members"): "admin_full_access",
    ("create", "classes"): "instructor_access",
    ("read", "classes"): "reception_access",
    ("update", "classes"): "instructor_access",
    ("delete", "classes"): "admin_full_access",
    ("read", "payments"): "financial_access",
    ("create", "payments"): "financial_access",
    ("update", "payments"): "financial_access",
    ("read", "financial_reports"): "financial_access",
    ("read", "reports"): "admin_full_access",
    ("read", "basic_reports"): "reception_access",
    ("manage", "equipment"): "admin_full_access",
    ("read", "equipment"): "reception_access",
    ("manage", "competitions"): "instructor_access",
    ("read", "competitions"): "reception_access",
}

DEFAULT_ROLES: dict[str, dict[str, Any]] = {
    "admin": {
        "name": "Administrator",
        "description": "Manages the whole network",
        "permissions": [
            "manage:users", "manage:roles", "manage:permissions", "manage:policies", "manage:settings",
            "create:members", "read:members", "update:members", "delete:members",
            "create:classes", "read:classes", "update:classes", "delete:classes",
            "read:payments", "create:payments", "update:payments", "read:financial_reports",
            "read:reports", "manage:equipment", "manage:competitions",
        ],
    },
    "instructor": {
        "name": "Instructor",
        "description": "Teaches classes and follows student progress",
        "permissions": [
            "read:members", "update:members",
            "create:classes", "read:classes", "update:classes",
            "read:equipment", "read:competitions",
        ],
    },
    "financial_manager": {
        "name": "Financial Manager",
        "description": "Handles payments and financial reporting",
        "permissions": [
            "read:members", "update:members",
            "read:payments", "create:payments", "update:payments", "read:financial_reports",
            "read:reports", "read:equipment",
        ],
    },
    "receptionist": {
        "name": "Receptionist",
        "description": "Front desk",
        "permissions": [
            "create:members", "read:members", "update:members",
            "read:classes", "read:basic_reports", "read:equipment",
        ],
    },
}


@dataclass
class SyncResult:
    """Created/existing counts of one install_defaults pass"""

    policies_created: int = 0
    permissions_created: int = 0
    roles_created: int = 0
    attachments_created: int = 0
    primary_tenant: Tenant | None = field(default=None, repr=False)


class SetupService:
    """Bootstraps landlords with the default access catalogue"""

    def __init__(self, db: Session):
        self.db = db
        self.landlord_repo = LandlordRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.permission_repo = PermissionRepository(db)
        self.role_repo = RoleRepository(db)
        self.role_permission_repo = RolePermissionRepository(db)

    def create_network(self, data: NetworkCreate) -> tuple[Landlord, Tenant, Tenant | None]:
        """
        Create a landlord, its primary tenant and the default catalogue.

        Args:
            data: Network name, description, config and an optional first branch name

        Returns:
            Tuple of (landlord, primary tenant, first branch or None)

        Raises:
            ConflictException: If a landlord with this name exists
        """
        name = data.name.strip()
        if self.landlord_repo.get_by_name(name):
            raise ConflictException(f"Network '{name}' already exists")

        config = {"timezone": DEFAULT_TIMEZONE, "default_currency": DEFAULT_CURRENCY}
        config.update(data.config)
        landlord = self.landlord_repo.create(
            Landlord(name=name, description=data.description, config=config)
        )
        logger.info("Created network %s (%s)", name, landlord.id)

        result = self.install_defaults(landlord.id)

        first_tenant = None
        if data.first_tenant_name and data.first_tenant_name.strip():
            first_tenant = self.tenant_repo.create(
                Tenant(
                    name=data.first_tenant_name.strip(),
                    config={"type": "branch", "timezone": config["timezone"]},
                    landlord_id=landlord.id,
                )
            )
            logger.info("Added branch %s to network %s", first_tenant.name, landlord.id)

        return landlord, result.primary_tenant, first_tenant

    def install_defaults(self, landlord_id: uuid.UUID) -> SyncResult:
        """
        Ensure the default catalogue exists for a landlord.

        Safe to run repeatedly: existing policies, permissions, roles and
        attachments are kept as they are, missing ones are created.

        Raises:
            NotFoundException: If the landlord does not exist
        """
        landlord = self.landlord_repo.get_by_id(landlord_id)
        if not landlord:
            raise NotFoundException("Landlord not found")

        result = SyncResult()
        primary = self._ensure_primary_tenant(landlord)
        result.primary_tenant = primary

        policies: dict[str, Policy] = {}
        for code, definition in DEFAULT_POLICIES.items():
            policy = self.policy_repo.get_by_code(primary.id, code)
            if policy is None:
                policy = self.policy_repo.create(
                    Policy(
                        tenant_id=primary.id,
                        code=code,
                        name=definition["name"],
                        description=definition["description"],
                        effect=PolicyEffect.ALLOW,
                        actions=list(definition["actions"]),
                        resources=list(definition["resources"]),
                        conditions=dict(definition["conditions"]),
                    )
                )
                result.policies_created += 1
            policies[code] = policy

        permissions: dict[str, Permission] = {}
        for (action, resource), policy_code in DEFAULT_PERMISSIONS.items():
            permission = self.permission_repo.get_by_action_and_resource(landlord.id, action, resource)
            if permission is None:
                permission = self.permission_repo.create(
                    Permission(
                        landlord_id=landlord.id,
                        action=action,
                        resource=resource,
                        policy_id=policies[policy_code].id,
                    )
                )
                result.permissions_created += 1
            permissions[permission.key] = permission

        for code, definition in DEFAULT_ROLES.items():
            role = self.role_repo.get_by_code(landlord.id, code)
            if role is None:
                role = self.role_repo.create(
                    Role(
                        landlord_id=landlord.id,
                        code=code,
                        name=definition["name"],
                        description=definition["description"],
                    )
                )
                result.roles_created += 1
            for key in definition["permissions"]:
                permission = permissions[key]
                if self.role_permission_repo.get(role.id, permission.id) is None:
                    self.role_permission_repo.create(
                        RolePermission(role_id=role.id, permission_id=permission.id, inherit_policy=True)
                    )
                    result.attachments_created += 1

        logger.info(
            "Defaults for landlord %s: %d policies, %d permissions, %d roles, %d attachments created",
            landlord.id,
            result.policies_created,
            result.permissions_created,
            result.roles_created,
            result.attachments_created,
        )
        return result

    def network_status(self, landlord_id: uuid.UUID) -> NetworkStatusResponse:
        """
        Report the catalogue counts of a landlord.

        Raises:
            NotFoundException: If the landlord does not exist
        """
        if not self.landlord_repo.get_by_id(landlord_id):
            raise NotFoundException("Landlord not found")

        roles = self.role_repo.count_by_landlord(landlord_id)
        permissions = self.permission_repo.count_by_landlord(landlord_id)
        policies = self.policy_repo.count_by_landlord(landlord_id)
        return NetworkStatusResponse(
            landlord_id=landlord_id,
            tenants_count=self.tenant_repo.count_by_landlord(landlord_id),
            roles_count=roles,
            permissions_count=permissions,
            policies_count=policies,
            has_roles=roles > 0,
            has_permissions=permissions > 0,
            has_policies=policies > 0,
        )

    def _ensure_primary_tenant(self, landlord: Landlord) -> Tenant:
        tenants = self.tenant_repo.get_by_landlord(landlord.id)

        for tenant in tenants:
            if (tenant.config or {}).get(PRIMARY_TENANT_FLAG) is True:
                return tenant

        default_name = landlord.name + PRIMARY_TENANT_SUFFIX
        for tenant in tenants:
            if tenant.name.lower() == default_name.lower():
                return tenant

        landlord_config = landlord.config or {}
        config = {
            PRIMARY_TENANT_FLAG: True,
            "type": "headquarters",
            "region": "primary",
            "landlord_id": str(landlord.id),
            "landlord_name": landlord.name,
            "timezone": landlord_config.get("timezone") or DEFAULT_TIMEZONE,
            "default_currency": landlord_config.get("default_currency") or DEFAULT_CURRENCY,
            "features": ["member_management", "class_scheduling", "billing", "reporting"],
        }
        tenant = self.tenant_repo.create(Tenant(name=default_name, config=config, landlord_id=landlord.id))
        logger.info("Created primary tenant %s for landlord %s", tenant.name, landlord.id)
        return tenant
