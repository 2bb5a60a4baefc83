"""Record lookup and the file download authorization gate"""

from .access import AccessDecision, DenyReason, FileAuthorizationGate, evaluate_download_access
from .store import RecordStore, RecordView

__all__ = [
    "AccessDecision",
    "DenyReason",
    "FileAuthorizationGate",
    "evaluate_download_access",
    "RecordStore",
    "RecordView",
]
