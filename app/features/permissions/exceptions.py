"""
Errors raised by permission guards.

Each error knows its HTTP status and response body; app.main registers a single
handler for PermissionCheckError.
"""
from collections.abc import Iterable
from typing import Any, Dict, Optional

from fastapi import status

from app.core import config
from app.features.permissions.constants import DEFAULT_RESOURCE_LABEL


class PermissionCheckError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Permission check failed"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_content(self) -> Dict[str, Any]:
        return {"message": self.message}


class AuthenticationRequired(PermissionCheckError):
    """No caller identity on the request."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class CallerNotFound(PermissionCheckError):
    """Identity present but no matching user record."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User not found"


class PermissionDenied(PermissionCheckError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"

    def __init__(self, required: Iterable[str], resource: Optional[str] = None):
        super().__init__()
        self.required = sorted(required)
        self.resource = resource or DEFAULT_RESOURCE_LABEL

    def to_content(self) -> Dict[str, Any]:
        return {"message": self.message, "required": self.required, "resource": self.resource}


class AdminRequired(PermissionCheckError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Admin access required"


class InternalError(PermissionCheckError):
    """
    Caller store failure or any unexpected fault during a check.

    The detail is only sent to clients when running in development.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Permission check failed"

    def __init__(self, detail: str):
        super().__init__()
        self.detail = detail

    def to_content(self) -> Dict[str, Any]:
        error = self.detail if config.is_development() else "Internal server error"
        return {"message": self.message, "error": error}


class CallerLookupError(Exception):
    """The caller store could not be queried."""
