"""SQLAlchemy Models for the archive access service"""

from .base import Base
from .user import User
from .record import Record, AccessLevel
from .access_request import AccessRequest
from .audit_log import AuditLog

__all__ = [
    "Base",
    "User",
    "Record",
    "AccessLevel",
    "AccessRequest",
    "AuditLog",
]
