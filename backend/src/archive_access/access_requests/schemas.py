"""Pydantic schemas for the access requests API"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .status import AccessRequestStatus, AccessRequestType


class AccessRequestCreate(BaseModel):
    """Schema for POST /requests"""
    record_id: UUID
    type: AccessRequestType = Field(..., description="VIEW (reading room) or SCAN")

    model_config = ConfigDict(extra='forbid')


class AccessRequestStatusUpdate(BaseModel):
    """Schema for PATCH /requests/{id}"""
    status: AccessRequestStatus
    rejection_reason: Optional[str] = Field(
        None,
        max_length=2000,
        description="Required when status is REJECTED"
    )

    model_config = ConfigDict(extra='forbid')


class AccessRequestResponse(BaseModel):
    """Response schema for an access request"""
    id: UUID
    record_id: UUID
    user_id: UUID
    type: AccessRequestType
    status: AccessRequestStatus
    rejection_reason: Optional[str] = None
    processed_by_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AllowedTransitionsResponse(BaseModel):
    """Statuses a request may move to next"""
    id: UUID
    status: AccessRequestStatus
    allowed_transitions: List[AccessRequestStatus]
