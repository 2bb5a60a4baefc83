"""Records API Router - download authorization and file delivery.

Every download attempt goes through the authorization gate; nothing is cached.
"""

import mimetypes
from pathlib import Path
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..access_requests.service import AccessRequestService
from ..audit.service import get_client_info, log_audit_event
from ..auth.dependencies import CurrentPrincipal
from ..config import get_settings
from ..database import get_db
from ..observability.logging_config import get_logger
from .access import DenyReason

logger = get_logger(__name__)

router = APIRouter(prefix="/records", tags=["records"])

_DENY_MESSAGES = {
    DenyReason.NO_FILE: "This record has no attached file",
    DenyReason.REQUIRES_APPROVED_REQUEST: (
        "File access requires an approved access request for this record"
    ),
    DenyReason.FORBIDDEN: "Access denied",
}


class AccessDecisionResponse(BaseModel):
    """Download gate decision for the current user"""
    record_id: UUID
    allowed: bool
    reason: Optional[DenyReason] = None


def _resolve_file_path(file_path: str) -> Optional[Path]:
    """Resolve a stored path under UPLOAD_DIR; None if it escapes or is missing."""
    root = Path(get_settings().UPLOAD_DIR).resolve()
    candidate = (root / file_path).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


@router.get(
    "/{record_id}/access",
    response_model=AccessDecisionResponse,
    summary="Check download access",
    description="Returns whether the current user may download the record's file, and why not.",
)
def check_access(
    record_id: UUID,
    principal: CurrentPrincipal,
    db: Session = Depends(get_db)
) -> AccessDecisionResponse:
    decision = AccessRequestService(db).authorize_download(record_id, principal)
    return AccessDecisionResponse(
        record_id=record_id,
        allowed=decision.allowed,
        reason=decision.reason,
    )


@router.get(
    "/{record_id}/download",
    summary="Download record file",
    description="""
    Stream the file attached to a record.

    **Access:**
    - ADMIN and ARCHIVIST: always (when a file is attached)
    - RESEARCHER: only with an APPROVED or COMPLETED request for the record

    **Errors:** 404 when the record or its file is missing, 403 when denied
    """,
)
def download_file(
    record_id: UUID,
    request: Request,
    principal: CurrentPrincipal,
    db: Session = Depends(get_db)
) -> FileResponse:
    service = AccessRequestService(db)
    record = service.records.get_record(record_id)
    decision = service.gate.authorize_download(record, principal)
    ip_address, user_agent = get_client_info(request)

    if not decision.allowed:
        log_audit_event(
            db=db,
            action="FILE_DOWNLOAD_DENIED",
            actor_id=principal.id,
            entity_type="record",
            entity_id=record.id,
            metadata={"reason": decision.reason.value},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.commit()

        status_code = (
            status.HTTP_404_NOT_FOUND
            if decision.reason == DenyReason.NO_FILE
            else status.HTTP_403_FORBIDDEN
        )
        raise HTTPException(status_code=status_code, detail=_DENY_MESSAGES[decision.reason])

    path = _resolve_file_path(record.file_path)
    if path is None:
        logger.error(
            f"File for record {record.id} missing from storage",
            extra={"record_id": record.id}
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found on server",
        )

    log_audit_event(
        db=db,
        action="FILE_DOWNLOADED",
        actor_id=principal.id,
        entity_type="record",
        entity_id=record.id,
        metadata={"file_name": record.file_name},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.commit()

    media_type, _ = mimetypes.guess_type(record.file_name or path.name)
    return FileResponse(
        path,
        media_type=media_type or "application/octet-stream",
        filename=record.file_name or path.name,
    )
