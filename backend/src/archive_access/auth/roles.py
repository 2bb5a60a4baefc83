"""User roles and permission matrix for the archive.

Roles are a closed set; permissions are granted per action, not inherited,
because creating access requests is reserved for researchers.

Permission Matrix:
┌──────────────────────────┬───────┬───────────┬────────────┐
│ Action                   │ ADMIN │ ARCHIVIST │ RESEARCHER │
├──────────────────────────┼───────┼───────────┼────────────┤
│ Create access request    │       │           │     ✓      │
│ List/view own requests   │   ✓   │     ✓     │     ✓      │
│ List/view all requests   │   ✓   │     ✓     │            │
│ Approve/reject/complete  │   ✓   │     ✓     │            │
│ Delete requests          │   ✓   │     ✓     │            │
│ Download any record file │   ✓   │     ✓     │            │
│ Download approved files  │   ✓   │     ✓     │     ✓      │
└──────────────────────────┴───────┴───────────┴────────────┘
"""

from enum import Enum
from typing import FrozenSet, Iterable, Union


class UserRole(str, Enum):
    """User roles.

    Values are stored as TEXT in the database and must match exactly.
    """
    ADMIN = "ADMIN"
    ARCHIVIST = "ARCHIVIST"
    RESEARCHER = "RESEARCHER"


# Staff read every request and every record file
STAFF_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.ARCHIVIST})


def parse_role(value: Union[str, UserRole]) -> UserRole:
    """Parse a stored role value.

    Raises:
        ValueError: If the value is not one of the known roles
    """
    return UserRole(value)


def has_role(user_role: Union[str, UserRole], allowed_roles: Iterable[UserRole]) -> bool:
    """Check if a role is one of the allowed roles.

    Unknown role values never match.

    Examples:
        >>> has_role(UserRole.ARCHIVIST, STAFF_ROLES)
        True
        >>> has_role("RESEARCHER", STAFF_ROLES)
        False
        >>> has_role("GUEST", [UserRole.RESEARCHER])
        False
    """
    try:
        role = parse_role(user_role)
    except ValueError:
        return False
    return role in set(allowed_roles)


def is_staff(user_role: Union[str, UserRole]) -> bool:
    return has_role(user_role, STAFF_ROLES)
