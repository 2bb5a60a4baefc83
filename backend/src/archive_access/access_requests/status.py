"""AccessRequest status state machine.

State Flow:
    NEW → IN_PROGRESS → APPROVED|REJECTED
    NEW → APPROVED|REJECTED
    APPROVED → COMPLETED

Terminal States: REJECTED, COMPLETED
"""

from enum import Enum
from typing import Dict, FrozenSet, List


class AccessRequestStatus(str, Enum):
    """Access request status enumeration.

    Values are stored as TEXT in the database and must match exactly.
    """
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


class AccessRequestType(str, Enum):
    """What the researcher asks for: reading-room viewing or a scan."""
    VIEW = "VIEW"
    SCAN = "SCAN"


INITIAL_STATUS = AccessRequestStatus.NEW

ALLOWED_TRANSITIONS: Dict[AccessRequestStatus, List[AccessRequestStatus]] = {
    AccessRequestStatus.NEW: [
        AccessRequestStatus.IN_PROGRESS,
        AccessRequestStatus.APPROVED,
        AccessRequestStatus.REJECTED,
    ],
    AccessRequestStatus.IN_PROGRESS: [
        AccessRequestStatus.APPROVED,
        AccessRequestStatus.REJECTED,
    ],
    AccessRequestStatus.APPROVED: [AccessRequestStatus.COMPLETED],
    AccessRequestStatus.REJECTED: [],  # Terminal state
    AccessRequestStatus.COMPLETED: [],  # Terminal state
}

TERMINAL_STATUSES: FrozenSet[AccessRequestStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Transitions that record who decided the request and when
DECISION_STATUSES: FrozenSet[AccessRequestStatus] = frozenset({
    AccessRequestStatus.APPROVED,
    AccessRequestStatus.REJECTED,
})

# A completed request went through approval, so it keeps granting the download
DOWNLOAD_GRANTING_STATUSES: FrozenSet[AccessRequestStatus] = frozenset({
    AccessRequestStatus.APPROVED,
    AccessRequestStatus.COMPLETED,
})


def can_transition(
    current_status: AccessRequestStatus,
    new_status: AccessRequestStatus
) -> bool:
    """Check if a state transition is allowed without raising exception.

    Args:
        current_status: Current request status
        new_status: Target status to transition to

    Returns:
        True if transition is allowed, False otherwise

    Example:
        >>> can_transition(AccessRequestStatus.NEW, AccessRequestStatus.APPROVED)
        True
        >>> can_transition(AccessRequestStatus.NEW, AccessRequestStatus.COMPLETED)
        False
    """
    return new_status in ALLOWED_TRANSITIONS.get(current_status, [])


def get_allowed_transitions(status: AccessRequestStatus) -> List[AccessRequestStatus]:
    """Get list of allowed transitions from a given status."""
    return list(ALLOWED_TRANSITIONS.get(status, []))


def is_terminal(status: AccessRequestStatus) -> bool:
    return status in TERMINAL_STATUSES
