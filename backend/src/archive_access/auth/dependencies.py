"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating JWT tokens from requests
- Loading the current authenticated user
- Producing the Principal consumed by the access request core
- Enforcing role-based access control

Usage:
    @router.get("/protected")
    def protected_endpoint(principal: CurrentPrincipal):
        return {"id": str(principal.id)}

    @router.patch("/requests/{request_id}")
    def decide(principal: Principal = Depends(require_roles(UserRole.ADMIN, UserRole.ARCHIVIST))):
        ...
"""

from typing import Callable, Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .jwt import decode_token
from .principal import Principal
from .roles import UserRole, STAFF_ROLES, has_role


security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Extract and validate JWT token, returning the authenticated user.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Validates token signature and expiration
    3. Loads user from database
    4. Checks user is ACTIVE (not DISABLED)

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or user not found
        HTTPException 403: If user status is DISABLED
    """
    token = credentials.credentials

    try:
        payload = decode_token(token)

        user_id_str = payload.get("sub")
        if not user_id_str:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID claim",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user_id = UUID(user_id_str)

    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token claims: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.status != "ACTIVE":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    """Identity context for the access request core.

    Raises:
        HTTPException 500: If the stored role is not a known role
    """
    try:
        return Principal.from_user(current_user)
    except ValueError:
        # Invalid role in database (should never happen due to CHECK constraint)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Invalid user role: {current_user.role}",
        )


def require_roles(*allowed_roles: UserRole) -> Callable:
    """Create a dependency that admits only the given roles.

    Roles are not hierarchical: an ADMIN does not pass a RESEARCHER-only check.

    Example:
        @router.post("/requests")
        def create(principal: Principal = Depends(require_roles(UserRole.RESEARCHER))):
            ...

    Raises:
        HTTPException 403: If the principal's role is not allowed
    """
    allowed = frozenset(allowed_roles)

    def role_dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_role(principal.role, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    "Insufficient permissions. Required role: "
                    f"{' or '.join(sorted(role.value for role in allowed))}"
                ),
            )
        return principal

    return role_dependency


def get_current_staff(
    principal: Principal = Depends(require_roles(*STAFF_ROLES))
) -> Principal:
    """Convenience dependency for ADMIN/ARCHIVIST endpoints."""
    return principal


def get_current_researcher(
    principal: Principal = Depends(require_roles(UserRole.RESEARCHER))
) -> Principal:
    """Convenience dependency for RESEARCHER-only endpoints."""
    return principal


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
