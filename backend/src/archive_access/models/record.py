"""Record SQLAlchemy model

A record is an archival unit (item or folder) described in an inventory.
It may carry one attached digitized file. Record CRUD is owned by the
cataloguing side of the system; this service only reads it.
"""

import enum
from uuid import uuid4

from sqlalchemy import Column, Text, BigInteger, DateTime, Uuid, CheckConstraint

from .base import Base, utcnow


class AccessLevel(str, enum.Enum):
    """Declared access level of a record."""
    PUBLIC = "PUBLIC"
    RESTRICTED = "RESTRICTED"


class Record(Base):
    """Archival unit with an optional attached file."""
    __tablename__ = "record"

    id = Column(Uuid, primary_key=True, default=uuid4)
    ref_code = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    access_level = Column(Text, nullable=False, default=AccessLevel.PUBLIC.value)
    file_path = Column(Text, nullable=True, comment="Path relative to UPLOAD_DIR")
    file_name = Column(Text, nullable=True, comment="Original file name shown on download")
    file_size = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "access_level IN ('PUBLIC', 'RESTRICTED')",
            name='ck_record_access_level'
        ),
    )

    @property
    def has_file(self) -> bool:
        return self.file_path is not None

    def __repr__(self):
        return f"<Record(id={self.id}, ref_code='{self.ref_code}')>"
