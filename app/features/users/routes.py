"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status

from app.features.permissions.constants import Permission
from app.features.permissions.dependencies import (
    require_admin,
    require_ownership_or_permissions,
    require_permissions,
)
from app.features.permissions.exceptions import CallerLookupError, InternalError
from app.features.permissions.schemas import Caller, GrantContext
from app.features.users.dependencies import get_current_user, get_users_repository
from app.features.users.models import User
from app.features.users.repository import UsersRepository
from app.features.users.schemas import (
    PermissionAssignment,
    RoleAssignment,
    UserPublic,
    UserResponse,
    UserUpdate,
)
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["users"])


async def get_user_or_404(users: UsersRepository, user_id: str) -> User:
    try:
        user = await users.get_by_id(user_id)
    except CallerLookupError as e:
        log.exception("Failed to fetch user %s", user_id)
        raise InternalError(f"Failed to fetch user: {e}") from e

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(get_current_user)]
):
    """Get current authenticated user's profile."""
    return user


@router.get("/", response_model=list[UserPublic])
async def list_users(
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.READ_ALL))],
    users: Annotated[UsersRepository, Depends(get_users_repository)],
    skip: int = 0,
    limit: int = 50
):
    """List active users."""
    return await users.list_users(skip=skip, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(
    user_id: str,
    grant: Annotated[GrantContext, Depends(require_ownership_or_permissions(Permission.READ_ALL))],
    users: Annotated[UsersRepository, Depends(get_users_repository)]
):
    """Get a user record. Users may always read their own."""
    return await get_user_or_404(users, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    grant: Annotated[GrantContext, Depends(require_ownership_or_permissions(Permission.UPDATE_ALL))],
    users: Annotated[UsersRepository, Depends(get_users_repository)]
):
    """Update a user's profile. Users may always update their own."""
    user = await get_user_or_404(users, user_id)
    return await users.update(user, **update_data.model_dump(exclude_unset=True))


@router.put("/{user_id}/role", response_model=UserResponse)
async def assign_role(
    user_id: str,
    assignment: RoleAssignment,
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.ASSIGN_ROLES))],
    users: Annotated[UsersRepository, Depends(get_users_repository)]
):
    """Change a user's role."""
    if user_id == grant.user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot modify your own role"
        )

    user = await get_user_or_404(users, user_id)
    log.info("User %s assigned role %s to %s", grant.user.id, assignment.role.value, user_id)
    return await users.update(user, role=assignment.role.value)


@router.put("/{user_id}/permissions", response_model=UserResponse)
async def assign_permissions(
    user_id: str,
    assignment: PermissionAssignment,
    grant: Annotated[GrantContext, Depends(require_permissions(Permission.MANAGE_USERS))],
    users: Annotated[UsersRepository, Depends(get_users_repository)]
):
    """Replace a user's explicit permission grants."""
    user = await get_user_or_404(users, user_id)
    permissions = None
    if assignment.permissions is not None:
        permissions = sorted({p.value for p in assignment.permissions})

    log.info("User %s set explicit permissions of %s to %s", grant.user.id, user_id, permissions)
    return await users.update(user, permissions=permissions)


@router.delete("/{user_id}")
async def deactivate_user(
    user_id: str,
    admin: Annotated[Caller, Depends(require_admin())],
    users: Annotated[UsersRepository, Depends(get_users_repository)]
):
    """Deactivate a user account (admin only)."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate your own account"
        )

    user = await get_user_or_404(users, user_id)
    await users.update(user, is_active=False)
    return {"message": "User deactivated successfully"}
