"""
Security utilities for authentication and authorization.
Handles JWT tokens, password hashing, and resolving the owning user of a request.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from stockroom.core.config import settings
from stockroom.core.database import get_db


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer token scheme
security_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def _create_token(subject: str | uuid.UUID, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "exp": now + expires_delta,
        "sub": str(subject),
        "type": token_type,
        "iat": now
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: User ID
        expires_delta: Token lifetime, defaults to the configured access expiry

    Returns:
        Encoded JWT token string
    """
    return _create_token(
        subject,
        ACCESS_TOKEN,
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )


def create_refresh_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT refresh token."""
    return _create_token(
        subject,
        REFRESH_TOKEN,
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> uuid.UUID:
    """
    Decode and verify a JWT token, returning the user ID it was issued for.

    Raises:
        HTTPException: If the token is invalid, expired or of the wrong type
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type") != expected_type:
        raise _unauthorized(f"Invalid token type. {expected_type.capitalize()} token required.")

    try:
        return uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized("Invalid user ID in token")


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)
) -> uuid.UUID:
    """Extract and validate the user ID from the bearer token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return decode_token(credentials.credentials)


async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the current authenticated user from database.

    Raises:
        HTTPException: If user not found or inactive
    """
    # Import here to avoid circular dependency
    from stockroom.models.user import User

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


def verify_refresh_token(token: str) -> uuid.UUID:
    """Verify a refresh token and extract user ID."""
    return decode_token(token, expected_type=REFRESH_TOKEN)
