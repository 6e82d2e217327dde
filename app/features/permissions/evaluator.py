"""
Permission evaluation.

evaluate() runs these checks in order and stops at the first that allows:

1. admin bypass        caller.role in ADMIN_ROLES
2. ownership bypass    allow_owner and resource == "own" and the caller is the target
3. explicit grants     caller.permissions covers the requirement set
4. role grants         the caller's role grant covers the requirement set

Requirement sets are conjunctive. The evaluator does no I/O and never raises
for a resolved caller.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from app.features.permissions.constants import ADMIN_ROLES, OWN_RESOURCE, Permission
from app.features.permissions.ownership import resolve_ownership
from app.features.permissions.roles import ALL, AllGrant, RolePermissionTable, get_role_table
from app.features.permissions.schemas import Caller
from app.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class DecisionOptions:
    resource: Optional[str] = None
    allow_owner: bool = False


@dataclass(frozen=True)
class Verdict:
    allowed: bool
    # Which check decided: admin, owner, explicit, role or denied
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


ADMIN = Verdict(True, "admin")
OWNER = Verdict(True, "owner")
EXPLICIT = Verdict(True, "explicit")
ROLE = Verdict(True, "role")
DENIED = Verdict(False, "denied")


def normalize_permissions(permissions: Union[str, Permission, Iterable[Union[str, Permission]], None]) -> frozenset[str]:
    """Turn a single identifier or a collection of them into a requirement set."""
    if permissions is None:
        return frozenset()
    if isinstance(permissions, (str, Enum)):
        permissions = [permissions]
    return frozenset(p.value if isinstance(p, Enum) else str(p) for p in permissions)


def is_admin(caller: Caller) -> bool:
    return caller.role in ADMIN_ROLES


def has_explicit_permissions(caller: Caller, required: frozenset[str]) -> bool:
    if caller.permissions is None:
        return False
    return required <= caller.permissions


def has_role_permissions(caller: Caller, required: frozenset[str], table: RolePermissionTable) -> bool:
    if not caller.role:
        return False
    return table.grant_for(caller.role).covers(required)


def evaluate(
    caller: Caller,
    required: Any,
    options: Optional[DecisionOptions] = None,
    *,
    target_id: Optional[Any] = None,
    table: Optional[RolePermissionTable] = None,
) -> Verdict:
    """
    Decide whether caller satisfies the required permissions.

    Args:
        caller: Resolved caller snapshot
        required: Permission identifier or collection of identifiers
        options: Resource label and owner bypass flag
        target_id: Identifier of the user targeted by the request, for ownership
        table: Role table to consult (the active table if not given)

    Returns:
        Verdict naming the check that decided
    """
    options = options or DecisionOptions()
    required = normalize_permissions(required)

    if is_admin(caller):
        verdict = ADMIN
    elif options.allow_owner and options.resource == OWN_RESOURCE and resolve_ownership(caller, target_id):
        verdict = OWNER
    elif has_explicit_permissions(caller, required):
        verdict = EXPLICIT
    elif has_role_permissions(caller, required, table or get_role_table()):
        verdict = ROLE
    else:
        verdict = DENIED

    log.debug(
        "User %s (%s) %s %s on %s via %s",
        caller.id,
        caller.role,
        "granted" if verdict.allowed else "denied",
        sorted(required),
        options.resource,
        verdict.reason,
    )
    return verdict


def effective_permissions(caller: Caller, table: Optional[RolePermissionTable] = None) -> Union[frozenset[str], AllGrant]:
    """Everything the caller holds, or ALL for admins and wildcard roles."""
    if is_admin(caller):
        return ALL
    grant = (table or get_role_table()).grant_for(caller.role)
    if isinstance(grant, AllGrant):
        return ALL
    return grant.permissions | (caller.permissions or frozenset())
