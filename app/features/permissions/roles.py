"""
Role-permission table.

A role grants either an explicit permission set or every permission. The table
is immutable; reloading means building a new table and swapping it in whole
with replace_role_table().
"""
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Union

from app.features.permissions.constants import Permission, Role
from app.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class ExplicitGrant:
    """A fixed set of permission identifiers."""
    permissions: frozenset[str] = frozenset()

    def covers(self, required: frozenset[str]) -> bool:
        return required <= self.permissions


@dataclass(frozen=True)
class AllGrant:
    """Every permission, present and future."""

    def covers(self, required: frozenset[str]) -> bool:
        return True


RoleGrant = Union[ExplicitGrant, AllGrant]

ALL = AllGrant()
NO_GRANT = ExplicitGrant()


def _key(value: str | Enum) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _as_grant(value: RoleGrant | Iterable[str | Permission]) -> RoleGrant:
    if isinstance(value, (ExplicitGrant, AllGrant)):
        return value
    return ExplicitGrant(frozenset(_key(p) for p in value))


class RolePermissionTable(Mapping[str, RoleGrant]):
    """
    Read-only mapping of role name to RoleGrant.

    Construction fails if any Role is missing, so an incomplete table is caught
    at startup. Lookups for names outside the Role enumeration return NO_GRANT.
    """

    def __init__(self, grants: Mapping[str | Role, RoleGrant | Iterable[str | Permission]]):
        normalized = {_key(role): _as_grant(grant) for role, grant in grants.items()}
        missing = sorted(r.value for r in Role if r.value not in normalized)
        if missing:
            raise ValueError(f"Role permission table is missing roles: {', '.join(missing)}")
        self._grants = MappingProxyType(normalized)

    def __getitem__(self, role: str) -> RoleGrant:
        return self._grants[_key(role)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._grants)

    def __len__(self) -> int:
        return len(self._grants)

    def grant_for(self, role: str | Role | None) -> RoleGrant:
        if role is None:
            return NO_GRANT
        return self._grants.get(_key(role), NO_GRANT)

    def describe(self) -> dict[str, list[str]]:
        """JSON-friendly view, with "*" standing for AllGrant."""
        return {
            role: ["*"] if isinstance(grant, AllGrant) else sorted(grant.permissions)
            for role, grant in self._grants.items()
        }


DEFAULT_ROLE_PERMISSIONS = RolePermissionTable({
    Role.USER: [Permission.READ_OWN, Permission.UPDATE_OWN],
    Role.MODERATOR: [
        Permission.READ_OWN,
        Permission.UPDATE_OWN,
        Permission.READ_PRODUCTS,
        Permission.CREATE_PRODUCTS,
        Permission.UPDATE_PRODUCTS,
    ],
    Role.MANAGER: [
        Permission.READ_ALL,
        Permission.CREATE_ALL,
        Permission.UPDATE_ALL,
        Permission.READ_ORDERS,
        Permission.UPDATE_ORDERS,
    ],
    Role.ADMIN: ALL,
    Role.SUPERADMIN: ALL,
})


_active_table: RolePermissionTable = DEFAULT_ROLE_PERMISSIONS


def get_role_table() -> RolePermissionTable:
    return _active_table


def replace_role_table(table: RolePermissionTable) -> RolePermissionTable:
    """Swap the active table for a new one. Returns the previous table."""
    global _active_table
    if not isinstance(table, RolePermissionTable):
        raise TypeError("replace_role_table expects a RolePermissionTable")
    previous = _active_table
    _active_table = table
    log.info("Role permission table replaced (%d roles)", len(table))
    return previous
