"""Access request lifecycle engine.

Creates requests and drives them through the status state machine, keeping
the field invariants intact:

- every request starts in NEW with no rejection reason and no decision stamp
- rejection_reason is set exactly when the request is REJECTED
- APPROVED/REJECTED stamp processed_by_id and processed_at; COMPLETED does not

The engine checks the shape of a transition, not who asks for it. Role checks
belong to the caller.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..audit.service import log_audit_event
from ..config import get_settings
from ..models.access_request import AccessRequest
from ..models.base import utcnow
from ..observability.metrics import (
    access_requests_created_total,
    access_request_transitions_total,
    access_request_transition_conflicts_total,
)
from .errors import (
    AccessRequestValidationError,
    ConcurrentUpdateError,
    InvalidTransitionError,
)
from .repository import AccessRequestRepository
from .status import (
    AccessRequestStatus,
    AccessRequestType,
    DECISION_STATUSES,
    INITIAL_STATUS,
    can_transition,
    get_allowed_transitions,
)

logger = logging.getLogger(__name__)

ENTITY_TYPE = "access_request"


def _coerce_type(value: Union[str, AccessRequestType]) -> AccessRequestType:
    try:
        return AccessRequestType(value)
    except ValueError:
        raise AccessRequestValidationError(
            f"Invalid request type: {value}. "
            f"Allowed: {[t.value for t in AccessRequestType]}",
            details={"type": str(value)}
        )


def _coerce_status(value: Union[str, AccessRequestStatus]) -> AccessRequestStatus:
    try:
        return AccessRequestStatus(value)
    except ValueError:
        raise AccessRequestValidationError(
            f"Invalid request status: {value}. "
            f"Allowed: {[s.value for s in AccessRequestStatus]}",
            details={"status": str(value)}
        )


class AccessRequestLifecycle:
    """State machine engine for access requests.

    Flushes through the repository; the caller commits. A conflicting
    concurrent write rolls the whole session back before the transition is
    retried, so a caller that must keep other uncommitted work commits it
    before calling transition().
    """

    def __init__(self, db: Session, max_retries: Optional[int] = None):
        self.db = db
        self.repository = AccessRequestRepository(db)
        if max_retries is None:
            max_retries = get_settings().ACCESS_REQUEST_TRANSITION_RETRIES
        self.max_retries = max_retries

    def create(
        self,
        record_id: UUID,
        user_id: UUID,
        request_type: Union[str, AccessRequestType],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AccessRequest:
        """Create a NEW request.

        Referential validity of record_id and user_id is the caller's concern.

        Raises:
            AccessRequestValidationError: If request_type is not VIEW or SCAN
        """
        request_type = _coerce_type(request_type)

        request = AccessRequest(
            record_id=record_id,
            user_id=user_id,
            type=request_type.value,
            status=INITIAL_STATUS.value,
            rejection_reason=None,
            processed_by_id=None,
            processed_at=None,
        )
        self.repository.create(request)

        log_audit_event(
            db=self.db,
            action="ACCESS_REQUEST_CREATED",
            actor_id=user_id,
            entity_type=ENTITY_TYPE,
            entity_id=request.id,
            metadata={"record_id": str(record_id), "type": request_type.value},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        access_requests_created_total.labels(type=request_type.value).inc()
        logger.info(
            f"Access request {request.id} created",
            extra={"request_id_entity": request.id, "record_id": record_id, "user_id": user_id}
        )

        return request

    def transition(
        self,
        request_id: UUID,
        new_status: Union[str, AccessRequestStatus],
        rejection_reason: Optional[str],
        acting_principal_id: UUID,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AccessRequest:
        """Move a request to a new status.

        The read-validate-write sequence runs under a row lock and a version
        check. If another writer got in first, the session transaction is rolled
        back (discarding any pending work of the caller) and the sequence is
        repeated against the fresh row, so the loser of a race sees the
        winner's status and usually fails with InvalidTransitionError.

        Args:
            request_id: Request to transition
            new_status: Target status
            rejection_reason: Required (non-blank) for REJECTED, refused otherwise
            acting_principal_id: Principal recorded on APPROVED/REJECTED

        Returns:
            AccessRequest: The updated request

        Raises:
            NotFoundError: If the request does not exist
            InvalidTransitionError: If the edge is not allowed
            AccessRequestValidationError: On a missing or spurious rejection reason
            ConcurrentUpdateError: If retries are exhausted
        """
        target = _coerce_status(new_status)

        attempt = 0
        while True:
            try:
                return self._apply_transition(
                    request_id,
                    target,
                    rejection_reason,
                    acting_principal_id,
                    ip_address,
                    user_agent,
                )
            except StaleDataError:
                self.db.rollback()
                access_request_transition_conflicts_total.inc()
                attempt += 1
                logger.warning(
                    f"Concurrent update on access request {request_id}, attempt {attempt}",
                    extra={"request_id_entity": request_id, "to_status": target.value}
                )
                if attempt > self.max_retries:
                    raise ConcurrentUpdateError(
                        f"Access request {request_id} is being updated concurrently",
                        details={"request_id": str(request_id)}
                    )

    def _apply_transition(
        self,
        request_id: UUID,
        target: AccessRequestStatus,
        rejection_reason: Optional[str],
        acting_principal_id: UUID,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> AccessRequest:
        request = self.repository.get_for_update(request_id)
        current = AccessRequestStatus(request.status)

        if not can_transition(current, target):
            allowed = get_allowed_transitions(current)
            raise InvalidTransitionError(
                f"Invalid transition: {current.value} -> {target.value}. "
                f"Allowed transitions from {current.value}: {[s.value for s in allowed]}",
                details={
                    "from_status": current.value,
                    "to_status": target.value,
                    "allowed": [s.value for s in allowed],
                }
            )

        reason = rejection_reason.strip() if rejection_reason is not None else None

        if target == AccessRequestStatus.REJECTED:
            if not reason:
                raise AccessRequestValidationError("rejection reason required")
        elif reason:
            raise AccessRequestValidationError(
                "rejection reason is only accepted when rejecting a request"
            )

        if target in DECISION_STATUSES and acting_principal_id is None:
            raise AccessRequestValidationError(
                f"acting principal required to mark a request {target.value}"
            )

        # All checks passed; nothing below may fail validation
        now = utcnow()

        if target == AccessRequestStatus.REJECTED:
            request.rejection_reason = reason

        if target in DECISION_STATUSES:
            request.processed_by_id = acting_principal_id
            request.processed_at = now
        # COMPLETED keeps the decision stamp written at approval time

        request.status = target.value
        request.updated_at = now
        self.repository.save(request)

        log_audit_event(
            db=self.db,
            action=f"ACCESS_REQUEST_{target.value}",
            actor_id=acting_principal_id,
            entity_type=ENTITY_TYPE,
            entity_id=request.id,
            metadata={
                "from_status": current.value,
                "to_status": target.value,
                "rejection_reason": request.rejection_reason,
            },
            ip_address=ip_address,
            user_agent=user_agent,
        )

        access_request_transitions_total.labels(
            from_status=current.value,
            to_status=target.value
        ).inc()
        logger.info(
            f"Access request {request.id}: {current.value} -> {target.value}",
            extra={
                "request_id_entity": request.id,
                "from_status": current.value,
                "to_status": target.value,
                "user_id": acting_principal_id,
            }
        )

        return request

    def remove(
        self,
        request_id: UUID,
        acting_principal_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """Delete a request in any status.

        Raises:
            NotFoundError: If the request does not exist
        """
        request = self.repository.get(request_id)
        status = request.status
        record_id = request.record_id
        self.repository.delete(request)

        log_audit_event(
            db=self.db,
            action="ACCESS_REQUEST_DELETED",
            actor_id=acting_principal_id,
            entity_type=ENTITY_TYPE,
            entity_id=request_id,
            metadata={"status": status, "record_id": str(record_id)},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        logger.info(
            f"Access request {request_id} deleted",
            extra={"request_id_entity": request_id, "user_id": acting_principal_id}
        )
