"""Access request service - the operations exposed to the API layer.

Adds record existence and ownership checks around the lifecycle engine and
wires the download gate to the record store.
"""

from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from ..auth.principal import Principal
from ..models.access_request import AccessRequest
from ..records.access import AccessDecision, FileAuthorizationGate
from ..records.store import RecordStore
from .errors import ForbiddenError
from .lifecycle import AccessRequestLifecycle
from .repository import AccessRequestRepository
from .status import AccessRequestStatus, AccessRequestType


class AccessRequestService:
    """Service for access request operations."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = AccessRequestRepository(db)
        self.lifecycle = AccessRequestLifecycle(db)
        self.records = RecordStore(db)
        self.gate = FileAuthorizationGate(self.repository)

    def create_request(
        self,
        record_id: UUID,
        principal: Principal,
        request_type: Union[str, AccessRequestType],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AccessRequest:
        """Create a request on behalf of the principal.

        Only researchers may originate requests; that rule is checked by the
        router.

        Raises:
            NotFoundError: If the record does not exist
            AccessRequestValidationError: If request_type is invalid
        """
        record = self.records.get_record(record_id)
        return self.lifecycle.create(
            record_id=record.id,
            user_id=principal.id,
            request_type=request_type,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def list_requests(self, principal: Principal) -> List[AccessRequest]:
        """Researchers see their own requests; staff see all. Newest first."""
        if principal.is_researcher:
            return self.repository.list_for_user(principal.id)
        return self.repository.list_all()

    def get_request(self, request_id: UUID, principal: Principal) -> AccessRequest:
        """Get one request, hiding other users' requests from researchers.

        Raises:
            NotFoundError: If the request does not exist
            ForbiddenError: If a researcher asks for someone else's request
        """
        request = self.repository.get(request_id)

        if principal.is_researcher and request.user_id != principal.id:
            raise ForbiddenError(
                "Access denied",
                details={"request_id": str(request_id)}
            )

        return request

    def update_request_status(
        self,
        request_id: UUID,
        new_status: Union[str, AccessRequestStatus],
        rejection_reason: Optional[str],
        principal: Principal,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AccessRequest:
        """Transition a request, recording the principal as decision maker.

        Raises:
            NotFoundError, InvalidTransitionError, AccessRequestValidationError,
            ConcurrentUpdateError
        """
        return self.lifecycle.transition(
            request_id=request_id,
            new_status=new_status,
            rejection_reason=rejection_reason,
            acting_principal_id=principal.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def delete_request(
        self,
        request_id: UUID,
        principal: Principal,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """Delete a request regardless of status.

        Raises:
            NotFoundError: If the request does not exist
        """
        self.lifecycle.remove(
            request_id,
            acting_principal_id=principal.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def authorize_download(self, record_id: UUID, principal: Principal) -> AccessDecision:
        """Evaluate the download gate for a record.

        Raises:
            NotFoundError: If the record does not exist
        """
        record = self.records.get_record(record_id)
        return self.gate.authorize_download(record, principal)
