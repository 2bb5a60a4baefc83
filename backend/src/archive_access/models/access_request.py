"""AccessRequest SQLAlchemy model

A researcher's request to view a record in the reading room or to have it
scanned. Requests move through a state machine driven by archivists; the
decision (approve/reject) is stamped with who made it and when.
"""

from uuid import uuid4

from sqlalchemy import (
    Column, Text, Integer, DateTime, Uuid, ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow
from ..access_requests.status import AccessRequestStatus


class AccessRequest(Base):
    """Access request for one record by one user.

    Invariants enforced at the storage layer:
    - rejection_reason is non-blank exactly when status is REJECTED
    - processed_by_id and processed_at are set together

    Concurrent updates are detected through the version column: a flush that
    updates a row whose version moved on raises StaleDataError.
    """
    __tablename__ = "access_request"

    id = Column(Uuid, primary_key=True, default=uuid4)
    record_id = Column(Uuid, ForeignKey("record.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    type = Column(Text, nullable=False)
    status = Column(
        Text,
        nullable=False,
        default=AccessRequestStatus.NEW.value,
        comment="NEW → IN_PROGRESS → APPROVED|REJECTED, APPROVED → COMPLETED"
    )
    rejection_reason = Column(Text, nullable=True)
    processed_by_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    record = relationship("Record")
    user = relationship("User", foreign_keys=[user_id])
    processed_by = relationship("User", foreign_keys=[processed_by_id])

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            "type IN ('VIEW', 'SCAN')",
            name='ck_access_request_type'
        ),
        CheckConstraint(
            "status IN ('NEW', 'IN_PROGRESS', 'APPROVED', 'REJECTED', 'COMPLETED')",
            name='ck_access_request_status'
        ),
        CheckConstraint(
            "(status = 'REJECTED' AND rejection_reason IS NOT NULL "
            "AND length(trim(rejection_reason)) > 0) "
            "OR (status <> 'REJECTED' AND rejection_reason IS NULL)",
            name='ck_access_request_rejection_reason'
        ),
        CheckConstraint(
            "(processed_by_id IS NULL AND processed_at IS NULL) "
            "OR (processed_by_id IS NOT NULL AND processed_at IS NOT NULL)",
            name='ck_access_request_processed_pair'
        ),
        # Supports exists_approved lookups from the download gate
        Index("ix_access_request_record_user_status", "record_id", "user_id", "status"),
        Index("ix_access_request_user_created_at", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<AccessRequest(id={self.id}, status='{self.status}', type='{self.type}')>"
