"""Audit logging service for security and lifecycle events.

This service provides a centralized interface for creating immutable audit log
entries. All security-relevant events must be logged through this service.

Audit Events:
- LOGIN_SUCCESS, LOGIN_FAILED
- ACCESS_REQUEST_CREATED
- ACCESS_REQUEST_IN_PROGRESS, ACCESS_REQUEST_APPROVED,
  ACCESS_REQUEST_REJECTED, ACCESS_REQUEST_COMPLETED
- ACCESS_REQUEST_DELETED
- FILE_DOWNLOADED, FILE_DOWNLOAD_DENIED
"""

from sqlalchemy.orm import Session
from uuid import UUID
from typing import Optional, Dict, Any
from fastapi import Request

from ..models.audit_log import AuditLog


def log_audit_event(
    db: Session,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Create an audit log entry.

    All parameters are stored as-is. This function does not validate action
    names or entity types.

    Args:
        db: Database session
        action: Event action (e.g., "ACCESS_REQUEST_APPROVED")
        actor_id: User who performed the action (None for anonymous/system events)
        entity_type: Type of entity affected (e.g., "access_request", "record")
        entity_id: ID of affected entity
        metadata: Additional context as JSON
        ip_address: Client IP address (IPv4 or IPv6)
        user_agent: Client User-Agent header

    Returns:
        AuditLog: The created audit log entry

    Example:
        log_audit_event(
            db=db,
            action="ACCESS_REQUEST_REJECTED",
            actor_id=principal.id,
            entity_type="access_request",
            entity_id=request.id,
            metadata={"from_status": "NEW", "reason": "document restricted"},
        )
    """
    audit_entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_json=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()  # Get ID without committing transaction

    return audit_entry


def get_client_info(request: Request) -> tuple[Optional[str], Optional[str]]:
    """Extract client IP (honouring X-Forwarded-For) and User-Agent."""
    ip_address = request.client.host if request.client else None
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP in the chain is the original client
        ip_address = forwarded_for.split(",")[0].strip()

    return ip_address, request.headers.get("User-Agent")
