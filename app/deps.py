"""
Dependencies module - reusable FastAPI dependencies for route handlers.

- get_current_user: validates the bearer JWT and loads the user
- require_location_member: 403 unless the user belongs to the location
"""

from fastapi import Depends, HTTPException, status  # FastAPI components
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials  # Auth header extraction
from sqlalchemy import select
from sqlalchemy.orm import Session  # Database session type

from app.core.security import decode_access_token
from app.db.session import get_db  # Database session dependency
from app.models.location import LocationMember
from app.models.user import User  # User ORM model

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer: Extracts tokens from the "Authorization: Bearer <token>" header
# - auto_error=True (default): rejects requests without the header
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT token and return the authenticated user.

    Any route that includes `current_user: User = Depends(get_current_user)`
    requires a valid token.

    Raises:
        401 Unauthorized: If token is invalid, expired, or user not found
        403 Forbidden: If user account is deactivated
    """
    # Same error for every auth failure (no hint whether the token or the user was bad)
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},  # Standard header per RFC 6750
    )

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        raise credentials_exception

    # Deactivated users are locked out even with an unexpired token
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return user


def require_location_member(db: Session, user: User, location_id: str) -> None:
    """
    Verify the user belongs to the location.

    Called from handlers whose location id arrives in the request body.

    Raises:
        403 Forbidden: Not a member
    """
    membership = db.scalar(
        select(LocationMember).where(
            LocationMember.location_id == location_id,
            LocationMember.user_id == user.id,
        )
    )
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this location",
        )
