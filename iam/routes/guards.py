"""Requirement pipelines shared by the routers."""

from iam.config import settings
from iam.services.authorization_gate import (
    OwnershipOrRoleRequirement,
    PermissionRequirement,
    RoleRequirement,
    SelfOnlyRequirement,
    TenantAccessRequirement,
)

SUPER_ADMIN_ONLY = RoleRequirement((settings.SUPER_ADMIN_ROLE_CODE,))

# super-admin always satisfies role requirements
LANDLORD_ADMIN = RoleRequirement((settings.ADMIN_ROLE_CODE,), landlord_param="landlord_id")

ANY_ADMIN = RoleRequirement((settings.SUPER_ADMIN_ROLE_CODE, settings.ADMIN_ROLE_CODE))

TENANT_MEMBER = TenantAccessRequirement()

MANAGE_POLICIES = PermissionRequirement("manage", "policies")

MANAGE_USERS = PermissionRequirement("manage", "users")

OWNER_OR_ADMIN = OwnershipOrRoleRequirement(
    roles=(settings.SUPER_ADMIN_ROLE_CODE, settings.ADMIN_ROLE_CODE)
)

SELF_ONLY = SelfOnlyRequirement()
