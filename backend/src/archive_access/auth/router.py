"""Authentication endpoints

Provides endpoints for user login and retrieving current user information.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from ..audit.service import get_client_info, log_audit_event
from ..database import get_db
from ..models.user import User
from .dependencies import CurrentUser
from .jwt import create_access_token, _get_jwt_expiry_minutes
from .password import verify_password
from .schemas import LoginRequest, LoginResponse, MeResponse, UserResponse


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Authenticate user and return JWT access token.

    Security measures:
    - Generic error message for unknown email and wrong password
    - Failed login attempts are logged to audit_log
    - Disabled accounts are rejected
    - last_login_at is updated on successful login

    Raises:
        HTTPException: 401 if credentials are invalid or account is disabled
    """
    ip_address, user_agent = get_client_info(request)

    user = db.query(User).filter(User.email == credentials.email.lower()).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        log_audit_event(
            db=db,
            action="LOGIN_FAILED",
            actor_id=user.id if user else None,
            metadata={"email": credentials.email, "reason": "invalid_credentials"},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if user.status != "ACTIVE":
        log_audit_event(
            db=db,
            action="LOGIN_FAILED",
            actor_id=user.id,
            metadata={"email": credentials.email, "reason": "account_disabled"},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    user.last_login_at = datetime.now(timezone.utc)
    log_audit_event(
        db=db,
        action="LOGIN_SUCCESS",
        actor_id=user.id,
        entity_type="user",
        entity_id=user.id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.commit()

    token = create_access_token(user_id=user.id, role=user.role, email=user.email)

    return LoginResponse(
        access_token=token,
        expires_in=_get_jwt_expiry_minutes() * 60,
    )


@router.get("/me", response_model=MeResponse)
def me(current_user: CurrentUser):
    """Return the authenticated user's profile."""
    return MeResponse(user=UserResponse.model_validate(current_user))
