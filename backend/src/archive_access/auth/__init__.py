"""Authentication and role checks - the identity context of the service"""

from .principal import Principal
from .roles import UserRole, STAFF_ROLES, has_role, is_staff

__all__ = ["Principal", "UserRole", "STAFF_ROLES", "has_role", "is_staff"]
