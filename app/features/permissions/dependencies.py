"""
Permission guards for route protection.

Guards are FastAPI dependencies built by check_permission() and friends. Each
call resolves the caller, evaluates it against the guard's requirement set and
either returns a GrantContext (also stored on request.state.permissions) or
raises a PermissionCheckError subclass, which app.main turns into a response.

Usage:
    @router.post("/products")
    async def create_product(
        grant: GrantContext = Depends(require_permissions(Permission.CREATE_PRODUCTS))
    ):
        ...
"""
from collections.abc import Iterable
from typing import Annotated, Optional, Union

from fastapi import Depends, Request

from app.features.permissions.constants import DEFAULT_RESOURCE_LABEL, OWN_RESOURCE, Permission
from app.features.permissions.evaluator import DecisionOptions, evaluate, is_admin, normalize_permissions
from app.features.permissions.exceptions import (
    AdminRequired,
    AuthenticationRequired,
    InternalError,
    PermissionCheckError,
    PermissionDenied,
)
from app.features.permissions.ownership import extract_target_id
from app.features.permissions.schemas import Caller, CallerSummary, GrantContext
from app.features.users.dependencies import (
    authenticate,
    fetch_user,
    get_identity,
    get_users_repository,
)
from app.features.users.repository import UsersRepository
from app.utils import get_logger


log = get_logger(__name__)

Requirement = Union[str, Permission, Iterable[Union[str, Permission]]]


async def load_caller(request: Request, users: UsersRepository) -> Caller:
    """
    Resolve the identity on the request to a Caller.

    Raises:
        AuthenticationRequired: no identity on the request
        CallerNotFound: identity does not match an active user
        InternalError: the lookup failed for any other reason
    """
    user_id = get_identity(request)
    if not user_id:
        raise AuthenticationRequired()

    try:
        user = await fetch_user(users, user_id)
        return Caller.model_validate(user)
    except PermissionCheckError:
        raise
    except Exception as e:
        log.exception("Permission check failed while loading user %s", user_id)
        raise InternalError(str(e)) from e


def build_grant_context(caller: Caller, granted: Iterable[str], resource: Optional[str]) -> GrantContext:
    return GrantContext(
        user=CallerSummary(id=caller.id, email=caller.email, role=caller.role),
        granted=sorted(granted),
        resource=resource or DEFAULT_RESOURCE_LABEL,
    )


def get_grant_context(request: Request) -> Optional[GrantContext]:
    """GrantContext left by the guard that allowed this request, if any."""
    return getattr(request.state, "permissions", None)


def check_permission(required: Requirement, resource: Optional[str] = None, allow_owner: bool = False):
    """
    Build a guard requiring every permission in `required`.

    Args:
        required: Permission identifier or collection of identifiers
        resource: Resource label; "own" marks self-scoped routes
        allow_owner: With resource="own", let the targeted user through

    Returns:
        Dependency returning the GrantContext of an allowed request

    Raises (per request):
        AuthenticationRequired / CallerNotFound: 401
        PermissionDenied: 403 with the required set and resource label
        InternalError: 500
    """
    required_set = normalize_permissions(required)
    options = DecisionOptions(resource=resource, allow_owner=allow_owner)

    async def permission_dependency(
        request: Request,
        _identity: Annotated[Optional[str], Depends(authenticate)],
        users: Annotated[UsersRepository, Depends(get_users_repository)],
    ) -> GrantContext:
        caller = await load_caller(request, users)

        try:
            verdict = evaluate(caller, required_set, options, target_id=extract_target_id(request))
        except Exception as e:
            log.exception("Permission evaluation failed for user %s", caller.id)
            raise InternalError(str(e)) from e

        if not verdict.allowed:
            log.info(
                "Permission denied: user=%s role=%s required=%s resource=%s",
                caller.id, caller.role, sorted(required_set), options.resource,
            )
            raise PermissionDenied(required_set, options.resource)

        grant = build_grant_context(caller, required_set, options.resource)
        request.state.permissions = grant
        return grant

    return permission_dependency


def require_permissions(required: Requirement, resource: Optional[str] = None, allow_owner: bool = False):
    return check_permission(required, resource=resource, allow_owner=allow_owner)


def require_ownership_or_permissions(required: Requirement):
    """Guard letting the targeted user through, and others with `required`."""
    return check_permission(required, resource=OWN_RESOURCE, allow_owner=True)


def require_admin():
    """
    Guard for admin-only routes. Only the caller's role is checked.

    Usage:
        @router.delete("/users/{user_id}")
        async def deactivate_user(admin: Caller = Depends(require_admin())):
            ...
    """
    async def admin_dependency(
        request: Request,
        _identity: Annotated[Optional[str], Depends(authenticate)],
        users: Annotated[UsersRepository, Depends(get_users_repository)],
    ) -> Caller:
        caller = await load_caller(request, users)
        if not is_admin(caller):
            log.info("Admin access denied: user=%s role=%s", caller.id, caller.role)
            raise AdminRequired()
        return caller

    return admin_dependency


async def get_current_caller(
    request: Request,
    _identity: Annotated[Optional[str], Depends(authenticate)],
    users: Annotated[UsersRepository, Depends(get_users_repository)],
) -> Caller:
    """Resolved caller with no permission requirement."""
    return await load_caller(request, users)
