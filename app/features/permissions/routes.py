"""
Read-only permission API.

Exposes the catalog and role table, the current caller's effective permissions,
and a dry-run check that reports a verdict instead of rejecting the request.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from app.features.permissions.constants import ADMIN_ROLES, DEFAULT_RESOURCE_LABEL, Permission
from app.features.permissions.dependencies import get_current_caller
from app.features.permissions.evaluator import (
    DecisionOptions,
    effective_permissions,
    evaluate,
    is_admin,
    normalize_permissions,
)
from app.features.permissions.roles import AllGrant, get_role_table
from app.features.permissions.schemas import (
    Caller,
    CatalogResponse,
    EffectivePermissionsResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    RoleTableResponse,
)
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(
    caller: Annotated[Caller, Depends(get_current_caller)]
):
    """List every permission identifier."""
    return CatalogResponse(permissions=[p.value for p in Permission])


@router.get("/roles", response_model=RoleTableResponse)
async def get_roles(
    caller: Annotated[Caller, Depends(get_current_caller)]
):
    """Role permission table. ["*"] marks roles granted every permission."""
    return RoleTableResponse(
        roles=get_role_table().describe(),
        admin_roles=sorted(ADMIN_ROLES),
    )


@router.get("/me", response_model=EffectivePermissionsResponse)
async def get_my_permissions(
    caller: Annotated[Caller, Depends(get_current_caller)]
):
    """Permissions held by the current caller, split by source."""
    grant = get_role_table().grant_for(caller.role)
    effective = effective_permissions(caller)

    return EffectivePermissionsResponse(
        user_id=caller.id,
        role=caller.role,
        explicit_permissions=sorted(caller.permissions or ()),
        role_permissions=["*"] if isinstance(grant, AllGrant) else sorted(grant.permissions),
        effective_permissions=["*"] if isinstance(effective, AllGrant) else sorted(effective),
        is_admin=is_admin(caller),
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_my_permissions(
    check: PermissionCheckRequest,
    caller: Annotated[Caller, Depends(get_current_caller)]
):
    """Evaluate the current caller against a requirement set without enforcing it."""
    required = normalize_permissions(check.permissions)
    verdict = evaluate(
        caller,
        required,
        DecisionOptions(resource=check.resource, allow_owner=check.allow_owner),
        target_id=check.target_id,
    )
    return PermissionCheckResponse(
        allowed=verdict.allowed,
        reason=verdict.reason,
        required=sorted(required),
        resource=check.resource or DEFAULT_RESOURCE_LABEL,
    )
