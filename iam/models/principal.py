"""Authenticated principal passed explicitly through the authorization gate."""

import uuid
from dataclasses import dataclass, field

from iam.models.user import User
from iam.models.user_tenant_role import UserTenantRole


@dataclass
class Principal:
    """
    Security context for one request.

    Built from the JWT subject and the user's grants as stored at request
    time. Passed as a parameter to the gate and the access resolver; there
    is no ambient or thread-local holder.

    Attributes:
        user: The authenticated, active User
        grants: Every UserTenantRole row of the user, with roles loaded
    """

    user: User
    grants: list[UserTenantRole] = field(default_factory=list)

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    def role_codes(self, landlord_id: uuid.UUID | None = None) -> set[str]:
        """
        Role codes held in any tenant.

        Args:
            landlord_id: When given, only roles owned by this landlord count
        """
        return {
            grant.role.code
            for grant in self.grants
            if landlord_id is None or grant.role.landlord_id == landlord_id
        }

    def tenant_ids(self) -> set[uuid.UUID]:
        return {grant.tenant_id for grant in self.grants}

    def has_tenant(self, tenant_id: uuid.UUID) -> bool:
        """Check if the user has at least one role in the tenant."""
        return tenant_id in self.tenant_ids()

    def has_role(self, code: str) -> bool:
        return code in self.role_codes()

    def __repr__(self) -> str:
        return f"<Principal(user_id={self.user.id}, roles={sorted(self.role_codes())})>"
