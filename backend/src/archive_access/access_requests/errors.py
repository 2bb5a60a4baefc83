"""Domain errors raised by the access request core.

Each error carries the HTTP status and machine-readable code the API layer
returns for it. Download denials are not errors: see records.access.
"""

from typing import Any, Dict, Optional


class AccessRequestError(Exception):
    """Base class for access request errors."""
    status_code: int = 400
    error_code: str = "access_request_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(AccessRequestError):
    """Referenced request, record or user does not exist."""
    status_code = 404
    error_code = "not_found"


class InvalidTransitionError(AccessRequestError):
    """Requested status change is not a legal edge from the current status."""
    status_code = 409
    error_code = "invalid_transition"


class AccessRequestValidationError(AccessRequestError):
    """Structurally invalid input (missing rejection reason, unknown type or status)."""
    status_code = 400
    error_code = "validation_error"


class ForbiddenError(AccessRequestError):
    """Principal lacks authority for the requested view or action."""
    status_code = 403
    error_code = "forbidden"


class ConcurrentUpdateError(AccessRequestError):
    """Request kept changing underneath a transition; retries were exhausted."""
    status_code = 409
    error_code = "concurrent_update"
