"""Role-based access policy.

The policy is an immutable value built once at application startup and
handed to the components that need it (see ``create_app``). Nothing in
the template core reads it directly; the API layer evaluates it and
passes the resulting boolean to the publisher.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class Permission(str, enum.Enum):
    """Actions a caller may be allowed to perform."""

    # User
    READ_OWN_PROFILE = "read:own_profile"
    UPDATE_OWN_PROFILE = "update:own_profile"
    READ_TEMPLATE = "read:template"
    CREATE_DOCUMENT = "create:document"

    # Creator
    CREATE_TEMPLATE = "create:template"
    UPDATE_OWN_TEMPLATE = "update:own_template"
    DELETE_OWN_TEMPLATE = "delete:own_template"

    # Admin
    MANAGE_USERS = "manage:users"
    MANAGE_TEMPLATES = "manage:templates"
    MODERATE_CONTENT = "moderate:content"


USER_PERMISSIONS = frozenset(
    {
        Permission.READ_OWN_PROFILE,
        Permission.UPDATE_OWN_PROFILE,
        Permission.READ_TEMPLATE,
        Permission.CREATE_DOCUMENT,
    }
)

CREATOR_PERMISSIONS = USER_PERMISSIONS | {
    Permission.CREATE_TEMPLATE,
    Permission.UPDATE_OWN_TEMPLATE,
    Permission.DELETE_OWN_TEMPLATE,
}

ADMIN_PERMISSIONS = CREATOR_PERMISSIONS | {
    Permission.MANAGE_USERS,
    Permission.MANAGE_TEMPLATES,
    Permission.MODERATE_CONTENT,
}


def _freeze(grants: Mapping[str, frozenset[Permission]]) -> Mapping[str, frozenset[Permission]]:
    return MappingProxyType({role: frozenset(perms) for role, perms in grants.items()})


@dataclass(frozen=True)
class AccessPolicy:
    """Immutable mapping of role name to granted permissions.

    Attributes:
        grants: Read-only mapping of role name to its permission set.
    """

    grants: Mapping[str, frozenset[Permission]] = field(
        default_factory=lambda: _freeze(
            {
                "user": USER_PERMISSIONS,
                "creator": CREATOR_PERMISSIONS,
                "admin": ADMIN_PERMISSIONS,
            }
        )
    )

    @classmethod
    def from_grants(cls, grants: Mapping[str, set[Permission] | frozenset[Permission]]) -> "AccessPolicy":
        """Build a policy from a plain role -> permissions mapping."""
        return cls(grants=_freeze({role: frozenset(perms) for role, perms in grants.items()}))

    def permissions_for(self, role: str) -> frozenset[Permission]:
        """Return the permissions granted to a role (empty for unknown roles)."""
        return self.grants.get(role, frozenset())

    def allows(self, role: str, *permissions: Permission) -> bool:
        """Check that a role holds every listed permission."""
        granted = self.permissions_for(role)
        return all(permission in granted for permission in permissions)
