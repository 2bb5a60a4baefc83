"""Access request lifecycle - status state machine, repository and services"""

from .status import (
    AccessRequestStatus,
    AccessRequestType,
    ALLOWED_TRANSITIONS,
    DOWNLOAD_GRANTING_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
    get_allowed_transitions,
)
from .errors import (
    AccessRequestError,
    NotFoundError,
    InvalidTransitionError,
    AccessRequestValidationError,
    ForbiddenError,
    ConcurrentUpdateError,
)

__all__ = [
    "AccessRequestStatus",
    "AccessRequestType",
    "ALLOWED_TRANSITIONS",
    "DOWNLOAD_GRANTING_STATUSES",
    "TERMINAL_STATUSES",
    "can_transition",
    "get_allowed_transitions",
    "AccessRequestError",
    "NotFoundError",
    "InvalidTransitionError",
    "AccessRequestValidationError",
    "ForbiddenError",
    "ConcurrentUpdateError",
]
