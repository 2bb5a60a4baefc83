"""Authenticated principal handed to the access request core.

The core never sees the User row; it works on this identifier/role pair.
"""

from dataclasses import dataclass
from uuid import UUID

from .roles import UserRole, is_staff


@dataclass(frozen=True)
class Principal:
    """An authenticated actor: stable identifier plus role tag."""
    id: UUID
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return is_staff(self.role)

    @property
    def is_researcher(self) -> bool:
        return self.role == UserRole.RESEARCHER

    @classmethod
    def from_user(cls, user) -> "Principal":
        """Build a principal from a User model.

        Raises:
            ValueError: If the stored role is not a known role
        """
        return cls(id=user.id, role=UserRole(user.role))
