"""
Security utilities - JWT token creation and verification.

Login and registration live in the auth service; this API only verifies
the bearer tokens it issues (and tests mint their own with the same key).
"""

from datetime import datetime, timedelta, timezone  # For token expiration
from typing import Optional

from jose import JWTError, jwt  # python-jose library for JWT encoding/decoding

from app.core.config import settings  # App configuration


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT (JSON Web Token) access token.

    Args:
        subject: The token's subject claim - the user's ID
                 This is stored in the "sub" field of the JWT payload
        expires_delta: Optional custom expiration time
                      If None, uses ACCESS_TOKEN_EXPIRE_MINUTES from settings

    Returns:
        A signed JWT string (e.g., "eyJhbGciOiJIUzI1NiIs...")

    Security notes:
        - The payload is NOT encrypted, just base64 encoded (anyone can read it)
        - The signature proves the token wasn't tampered with
        - Only someone with SECRET_KEY can create valid signatures
    """
    # Always use UTC to avoid timezone issues
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    # sub (subject): Who this token is for, exp (expiration): Unix timestamp
    to_encode = {"sub": subject, "exp": expire}

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """
    Verify a JWT and return its subject (user ID).

    Returns:
        The "sub" claim, or None if the token is invalid, expired,
        or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")
