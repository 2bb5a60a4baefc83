"""Access Requests API Router.

Researchers file requests to view or scan records; archivists and
administrators move them through the lifecycle.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..audit.service import get_client_info
from ..auth.dependencies import CurrentPrincipal, get_current_researcher, get_current_staff
from ..auth.principal import Principal
from ..database import get_db
from .schemas import (
    AccessRequestCreate,
    AccessRequestResponse,
    AccessRequestStatusUpdate,
    AllowedTransitionsResponse,
)
from .service import AccessRequestService
from .status import AccessRequestStatus, get_allowed_transitions


router = APIRouter(prefix="/requests", tags=["access_requests"])


@router.post(
    "",
    response_model=AccessRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an access request",
    description="""
    File a request to view a record in the reading room or to have it scanned.

    **Requirements:**
    - User must have the RESEARCHER role
    - The record must exist

    **Initial Status:** NEW

    **Audit Log:** Creates ACCESS_REQUEST_CREATED entry
    """
)
def create_request(
    payload: AccessRequestCreate,
    request: Request,
    principal: Principal = Depends(get_current_researcher),
    db: Session = Depends(get_db)
) -> AccessRequestResponse:
    ip_address, user_agent = get_client_info(request)

    access_request = AccessRequestService(db).create_request(
        record_id=payload.record_id,
        principal=principal,
        request_type=payload.type,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.commit()
    db.refresh(access_request)

    return AccessRequestResponse.model_validate(access_request)


@router.get(
    "",
    response_model=List[AccessRequestResponse],
    summary="List access requests",
    description="Researchers see their own requests, staff see all. Newest first."
)
def list_requests(
    principal: CurrentPrincipal,
    db: Session = Depends(get_db)
) -> List[AccessRequestResponse]:
    requests = AccessRequestService(db).list_requests(principal)
    return [AccessRequestResponse.model_validate(r) for r in requests]


@router.get(
    "/{request_id}",
    response_model=AccessRequestResponse,
    summary="Get an access request",
)
def get_request(
    request_id: UUID,
    principal: CurrentPrincipal,
    db: Session = Depends(get_db)
) -> AccessRequestResponse:
    """Get one request.

    Raises:
        404: Request not found
        403: Researcher asking for another user's request
    """
    access_request = AccessRequestService(db).get_request(request_id, principal)
    return AccessRequestResponse.model_validate(access_request)


@router.get(
    "/{request_id}/transitions",
    response_model=AllowedTransitionsResponse,
    summary="List allowed next statuses",
)
def get_request_transitions(
    request_id: UUID,
    principal: CurrentPrincipal,
    db: Session = Depends(get_db)
) -> AllowedTransitionsResponse:
    access_request = AccessRequestService(db).get_request(request_id, principal)
    current = AccessRequestStatus(access_request.status)
    return AllowedTransitionsResponse(
        id=access_request.id,
        status=current,
        allowed_transitions=get_allowed_transitions(current),
    )


@router.patch(
    "/{request_id}",
    response_model=AccessRequestResponse,
    summary="Update access request status",
    description="""
    Move a request through its lifecycle.

    **State Machine:**
    - NEW → IN_PROGRESS | APPROVED | REJECTED
    - IN_PROGRESS → APPROVED | REJECTED
    - APPROVED → COMPLETED
    - REJECTED, COMPLETED are terminal

    **Requirements:**
    - User must have the ADMIN or ARCHIVIST role
    - REJECTED requires a non-empty rejection_reason

    **Audit Log:** Creates ACCESS_REQUEST_<STATUS> entry
    """
)
def update_request_status(
    request_id: UUID,
    payload: AccessRequestStatusUpdate,
    request: Request,
    principal: Principal = Depends(get_current_staff),
    db: Session = Depends(get_db)
) -> AccessRequestResponse:
    """Transition a request.

    Raises:
        404: Request not found
        409: Transition not allowed from the current status
        400: Missing rejection reason
        403: User is not staff
    """
    ip_address, user_agent = get_client_info(request)

    access_request = AccessRequestService(db).update_request_status(
        request_id=request_id,
        new_status=payload.status,
        rejection_reason=payload.rejection_reason,
        principal=principal,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.commit()
    db.refresh(access_request)

    return AccessRequestResponse.model_validate(access_request)


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an access request",
)
def delete_request(
    request_id: UUID,
    request: Request,
    principal: Principal = Depends(get_current_staff),
    db: Session = Depends(get_db)
) -> Response:
    ip_address, user_agent = get_client_info(request)

    AccessRequestService(db).delete_request(
        request_id,
        principal,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
