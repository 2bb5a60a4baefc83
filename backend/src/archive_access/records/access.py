"""File authorization gate.

Decides whether a principal may download the file attached to a record:

1. record without a file        -> deny (NO_FILE)
2. ADMIN or ARCHIVIST           -> allow
3. RESEARCHER                   -> allow iff they hold an APPROVED or COMPLETED
                                   request for the record, else deny
                                   (REQUIRES_APPROVED_REQUEST)
4. any other role               -> deny (FORBIDDEN)

Denial is a normal outcome, returned as a value. Decisions are never cached:
files and approvals change, so every download attempt is evaluated again.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..access_requests.repository import AccessRequestRepository
from ..auth.principal import Principal
from ..auth.roles import UserRole, STAFF_ROLES
from ..observability.metrics import download_decisions_total
from .store import RecordView

logger = logging.getLogger(__name__)


class DenyReason(str, Enum):
    NO_FILE = "NO_FILE"
    REQUIRES_APPROVED_REQUEST = "REQUIRES_APPROVED_REQUEST"
    FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


def evaluate_download_access(
    has_file: bool,
    role: Union[str, UserRole],
    approval_lookup: Callable[[], bool],
) -> AccessDecision:
    """Pure download decision over file presence, role and approval.

    Args:
        has_file: Whether the record carries a file
        role: Principal role tag
        approval_lookup: Answers whether the principal holds a
            download-granting request; only called for researchers

    Returns:
        AccessDecision

    Example:
        >>> evaluate_download_access(True, UserRole.ARCHIVIST, lambda: False)
        AccessDecision(allowed=True, reason=None)
        >>> evaluate_download_access(False, UserRole.ADMIN, lambda: True).reason
        <DenyReason.NO_FILE: 'NO_FILE'>
    """
    if not has_file:
        return AccessDecision.deny(DenyReason.NO_FILE)

    try:
        role = UserRole(role)
    except ValueError:
        return AccessDecision.deny(DenyReason.FORBIDDEN)

    if role in STAFF_ROLES:
        return AccessDecision.allow()

    if role == UserRole.RESEARCHER:
        if approval_lookup():
            return AccessDecision.allow()
        return AccessDecision.deny(DenyReason.REQUIRES_APPROVED_REQUEST)

    return AccessDecision.deny(DenyReason.FORBIDDEN)


class FileAuthorizationGate:
    """Download gate backed by the access request repository."""

    def __init__(self, repository: AccessRequestRepository):
        self.repository = repository

    def authorize_download(self, record: RecordView, principal: Principal) -> AccessDecision:
        decision = evaluate_download_access(
            record.has_file,
            principal.role,
            lambda: self.repository.exists_approved(record.id, principal.id),
        )

        outcome = "allow" if decision.allowed else "deny"
        reason = decision.reason.value if decision.reason else "none"
        download_decisions_total.labels(outcome=outcome, reason=reason).inc()
        logger.info(
            f"Download {outcome} for record {record.id}",
            extra={
                "record_id": record.id,
                "user_id": principal.id,
                "decision": outcome,
                "reason": reason,
            }
        )

        return decision
