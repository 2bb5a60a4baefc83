"""Access request repository - persistence for AccessRequest rows."""

from typing import List
from uuid import UUID

from sqlalchemy import and_, desc, exists
from sqlalchemy.orm import Session

from ..models.access_request import AccessRequest
from .errors import NotFoundError
from .status import DOWNLOAD_GRANTING_STATUSES


class AccessRequestRepository:
    """Repository for access requests.

    Only flushes; committing is left to the unit of work that owns the session.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, request: AccessRequest) -> AccessRequest:
        """Persist a new request and assign its id and timestamps."""
        self.db.add(request)
        self.db.flush()
        return request

    def get(self, request_id: UUID) -> AccessRequest:
        """Get a request by ID.

        Raises:
            NotFoundError: If no request has this ID
        """
        request = self.db.query(AccessRequest).filter(
            AccessRequest.id == request_id
        ).first()

        if request is None:
            raise NotFoundError(
                f"Access request {request_id} not found",
                details={"request_id": str(request_id)}
            )

        return request

    def get_for_update(self, request_id: UUID) -> AccessRequest:
        """Get a request by ID, locking its row until the transaction ends.

        The row lock is a no-op on SQLite; the version column still catches
        a concurrent write there.

        Raises:
            NotFoundError: If no request has this ID
        """
        request = (
            self.db.query(AccessRequest)
            .filter(AccessRequest.id == request_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

        if request is None:
            raise NotFoundError(
                f"Access request {request_id} not found",
                details={"request_id": str(request_id)}
            )

        return request

    def list_for_user(self, user_id: UUID) -> List[AccessRequest]:
        """List one user's requests, newest first."""
        return (
            self.db.query(AccessRequest)
            .filter(AccessRequest.user_id == user_id)
            .order_by(desc(AccessRequest.created_at))
            .all()
        )

    def list_all(self) -> List[AccessRequest]:
        """List every request, newest first."""
        return (
            self.db.query(AccessRequest)
            .order_by(desc(AccessRequest.created_at))
            .all()
        )

    def exists_approved(self, record_id: UUID, user_id: UUID) -> bool:
        """Check whether the user holds a download-granting request for the record.

        APPROVED and COMPLETED both count.
        """
        granting = [status.value for status in DOWNLOAD_GRANTING_STATUSES]
        return bool(
            self.db.query(
                exists().where(
                    and_(
                        AccessRequest.record_id == record_id,
                        AccessRequest.user_id == user_id,
                        AccessRequest.status.in_(granting),
                    )
                )
            ).scalar()
        )

    def save(self, request: AccessRequest) -> AccessRequest:
        """Flush pending changes to a request.

        Raises:
            sqlalchemy.orm.exc.StaleDataError: If the row was updated by
                another transaction since it was loaded
        """
        self.db.add(request)
        self.db.flush()
        return request

    def delete(self, request: AccessRequest) -> None:
        self.db.delete(request)
        self.db.flush()
