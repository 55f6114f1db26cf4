"""Authentication utilities for the ResiLinked backend."""

from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from resilinked.users import Actor, UserDirectory, UserProfile

from .config import Settings, get_settings
from .database import get_user_directory
from .errors import APIError
from .logging_config import get_logger

logger = get_logger("auth")

# Cookie name for httpOnly auth
AUTH_COOKIE_NAME = "resilinked_auth"

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

# Bearer token scheme
# Make bearer optional to allow cookie fallback
security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
    user_type: str | None = None,
) -> str:
    """Create a JWT access token for a user."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)

    to_encode = {
        "sub": user_id,
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access",
    }
    if user_type:
        to_encode["user_type"] = user_type
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError:
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired token",
            "Your session has expired. Please log in again.",
            headers=BEARER_CHALLENGE,
        )


class AuthContext:
    """The authenticated caller, resolved against the user directory."""

    def __init__(self, user_id: str, user_type: str, profile: UserProfile):
        self.user_id = user_id
        self.user_type = user_type
        self.profile = profile

    @property
    def actor(self) -> Actor:
        return Actor(user_id=self.user_id, user_type=self.user_type)

    @property
    def is_admin(self) -> bool:
        return self.profile.is_admin


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
    request: Request,
) -> AuthContext:
    """Get the current authenticated user from the bearer token or cookie."""
    # Try Authorization header first, then fall back to cookie
    token = None
    if credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get(AUTH_COOKIE_NAME)

    if not token:
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authenticated - provide Authorization header or auth cookie",
            "Please log in to continue.",
            headers=BEARER_CHALLENGE,
        )

    payload = decode_token(token, settings)
    user_id = payload.get("sub")
    if not user_id:
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid token payload",
            "Your session is invalid. Please log in again.",
            headers=BEARER_CHALLENGE,
        )

    profile = users.get_user(user_id)
    if profile is None:
        logger.warning(f"Token for unknown user {user_id}")
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "User not found",
            "Your account could not be found. Please log in again.",
            headers=BEARER_CHALLENGE,
        )
    if not profile.is_verified:
        raise APIError(
            status.HTTP_403_FORBIDDEN,
            "Account not verified",
            "Your account is awaiting verification by the barangay.",
        )

    # The stored role wins over whatever the token claims
    return AuthContext(user_id=profile.user_id, user_type=profile.user_type, profile=profile)


# Type alias for dependency injection
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
