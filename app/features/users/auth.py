"""
Bearer token verification.

Tokens are issued elsewhere; this module only checks the signature and expiry
and reads the caller id from the `userId` claim.
"""
import jwt
from fastapi import HTTPException, status

from app.core import config
from app.features.permissions.exceptions import InternalError
from app.utils import get_logger


log = get_logger(__name__)


def verify_jwt_token(token: str) -> dict:
    """
    Verify a JWT and return its payload.

    Raises:
        HTTPException: 401 if the token is invalid or expired
        InternalError: the verification key or algorithm is unusable
    """
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"verify_exp": True},
        )
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
    except jwt.PyJWTError as e:
        # Key or algorithm problems are server misconfiguration, not a bad token
        log.error("Token verification failed: %s", e)
        raise InternalError(f"Token verification failed: {e}") from e
