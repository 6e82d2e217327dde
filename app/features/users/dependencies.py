"""
FastAPI dependencies for authentication and user lookup.
"""
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.exceptions import (
    AuthenticationRequired,
    CallerLookupError,
    CallerNotFound,
    InternalError,
)
from app.features.users.auth import verify_jwt_token
from app.features.users.models import User
from app.features.users.repository import UsersRepository
from app.utils import get_logger


log = get_logger(__name__)

# Missing credentials are not rejected here; guards decide what needs identity
security = HTTPBearer(auto_error=False)


async def authenticate(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[str]:
    """
    Establish the caller identity from the bearer token.

    Sets request.state.user_data = {"user_id": ...} when a valid token is sent.
    An identity already placed on the request by upstream middleware is kept.
    Returns the caller id, or None when the request carries no credentials.
    """
    existing = get_identity(request)
    if existing:
        return existing
    if credentials is None:
        return None

    payload = verify_jwt_token(credentials.credentials)
    user_id = payload.get("userId")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    request.state.user_data = {"user_id": str(user_id)}
    return str(user_id)


def get_identity(request: Request) -> Optional[str]:
    user_data = getattr(request.state, "user_data", None)
    if not isinstance(user_data, dict):
        return None
    user_id = user_data.get("user_id")
    return str(user_id) if user_id else None


async def get_users_repository(
    db: Annotated[AsyncSession, Depends(get_db)]
) -> UsersRepository:
    return UsersRepository(db)


async def fetch_user(users: UsersRepository, user_id: str) -> User:
    """
    Resolve an identity to an active user record.

    Raises:
        CallerNotFound: no such user, or the account is deactivated
        InternalError: the user store failed
    """
    try:
        user = await users.get_by_id(user_id)
    except CallerLookupError as e:
        log.exception("Failed to fetch user %s", user_id)
        raise InternalError(f"Failed to fetch user: {e}") from e

    if user is None or not user.is_active:
        log.info("No active user for identity %s", user_id)
        raise CallerNotFound()
    return user


async def get_current_user(
    user_id: Annotated[Optional[str], Depends(authenticate)],
    users: Annotated[UsersRepository, Depends(get_users_repository)],
) -> User:
    """
    Current authenticated user.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    if not user_id:
        raise AuthenticationRequired()
    return await fetch_user(users, user_id)


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
