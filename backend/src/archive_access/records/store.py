"""Read-only record lookup used by the download gate.

Record CRUD is owned elsewhere; this module only answers "does the record
exist, and does it carry a file".
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..access_requests.errors import NotFoundError
from ..models.record import Record


@dataclass(frozen=True)
class RecordView:
    """Snapshot of the record fields the access core needs."""
    id: UUID
    has_file: bool
    file_name: Optional[str]
    file_path: Optional[str]
    access_level: str

    @classmethod
    def from_model(cls, record: Record) -> "RecordView":
        return cls(
            id=record.id,
            has_file=record.has_file,
            file_name=record.file_name,
            file_path=record.file_path,
            access_level=record.access_level,
        )


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    def get_record(self, record_id: UUID) -> RecordView:
        """Get a record by ID.

        Raises:
            NotFoundError: If the record does not exist
        """
        record = self.db.query(Record).filter(Record.id == record_id).first()
        if record is None:
            raise NotFoundError(
                f"Record {record_id} not found",
                details={"record_id": str(record_id)}
            )
        return RecordView.from_model(record)
