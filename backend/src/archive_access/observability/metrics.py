"""Prometheus metrics for the archive access service."""

from prometheus_client import Counter

access_requests_created_total = Counter(
    "archive_access_requests_created_total",
    "Total access requests created",
    ["type"]  # VIEW|SCAN
)

access_request_transitions_total = Counter(
    "archive_access_request_transitions_total",
    "Total access request status transitions",
    ["from_status", "to_status"]
)

access_request_transition_conflicts_total = Counter(
    "archive_access_request_transition_conflicts_total",
    "Concurrent updates detected while transitioning an access request"
)

download_decisions_total = Counter(
    "archive_download_decisions_total",
    "File download authorization decisions",
    ["outcome", "reason"]  # outcome: allow|deny
)
