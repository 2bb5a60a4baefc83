"""User SQLAlchemy model"""

import re
from uuid import uuid4

from sqlalchemy import Column, Text, DateTime, Uuid, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import validates

from .base import Base, utcnow


class User(Base):
    """User model representing authenticated principals of the archive.

    Each user has one role (ADMIN, ARCHIVIST or RESEARCHER). Researchers carry
    optional profile fields shown to archivists when processing their requests.
    Passwords are hashed using Argon2id.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="RESEARCHER")
    password_hash = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE")

    # Researcher profile
    occupation = Column(Text, nullable=True)
    workplace = Column(Text, nullable=True)
    position = Column(Text, nullable=True)

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "role IN ('ADMIN', 'ARCHIVIST', 'RESEARCHER')",
            name='ck_user_role'
        ),
        CheckConstraint(
            "status IN ('ACTIVE', 'DISABLED')",
            name='ck_user_status'
        ),
        UniqueConstraint('email', name='uq_user_email'),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()
