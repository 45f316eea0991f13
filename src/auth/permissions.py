"""Role-based access control for the community.

Two roles:
- ADMIN (level 1): moderation and override of every author-only rule
- USER (level 0): authenticated member

Ownership is decided in one place, ``can_modify``, from a typed principal
and a typed authored resource.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    USER = "user"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.ADMIN: 1,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role (0 for unknown roles)."""
    if isinstance(role, str):
        try:
            role = UserRole(role.lower())
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.USER)
        True
        >>> has_permission("user", "admin")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as supplied by the auth service."""

    user_id: int
    nickname: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return has_permission(self.role, UserRole.ADMIN)


# Actor used when moderation applies a report resolution
SYSTEM_PRINCIPAL = Principal(user_id=0, nickname="system", role=UserRole.ADMIN)


class Authored(Protocol):
    """Any resource with a single author."""

    author_id: int


def is_author(principal: Principal | None, resource: Authored) -> bool:
    """True if the principal wrote the resource."""
    return principal is not None and principal.user_id == resource.author_id


def can_modify(principal: Principal | None, resource: Authored) -> bool:
    """Author-or-admin capability check.

    Examples:
        >>> from types import SimpleNamespace
        >>> post = SimpleNamespace(author_id=7)
        >>> can_modify(Principal(7, "a"), post)
        True
        >>> can_modify(Principal(8, "b"), post)
        False
        >>> can_modify(Principal(8, "b", UserRole.ADMIN), post)
        True
    """
    if principal is None:
        return False
    return principal.is_admin or is_author(principal, resource)
