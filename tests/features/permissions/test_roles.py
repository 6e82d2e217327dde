"""Unit tests for the role permission table."""

from __future__ import annotations

import pytest

from app.features.permissions import (
    ALL,
    DEFAULT_ROLE_PERMISSIONS,
    AllGrant,
    ExplicitGrant,
    Permission,
    Role,
    RolePermissionTable,
    get_role_table,
    replace_role_table,
)
from app.features.permissions.roles import NO_GRANT


class TestDefaultTable:
    def test_covers_every_role(self) -> None:
        assert set(DEFAULT_ROLE_PERMISSIONS) == {r.value for r in Role}

    def test_user_grants_own_account_only(self) -> None:
        grant = DEFAULT_ROLE_PERMISSIONS["user"]
        assert grant == ExplicitGrant(frozenset({"read:own", "update:own"}))

    def test_moderator_grants(self) -> None:
        grant = DEFAULT_ROLE_PERMISSIONS["moderator"]
        assert grant.permissions == {
            "read:own",
            "update:own",
            "read:products",
            "create:products",
            "update:products",
        }

    def test_manager_grants(self) -> None:
        grant = DEFAULT_ROLE_PERMISSIONS["manager"]
        assert grant.permissions == {
            "read:all",
            "create:all",
            "update:all",
            "read:orders",
            "update:orders",
        }

    @pytest.mark.parametrize("role", ["admin", "superadmin"])
    def test_admin_roles_grant_everything(self, role: str) -> None:
        assert isinstance(DEFAULT_ROLE_PERMISSIONS[role], AllGrant)

    def test_lookup_accepts_enum_members(self) -> None:
        assert DEFAULT_ROLE_PERMISSIONS.grant_for(Role.MANAGER) is DEFAULT_ROLE_PERMISSIONS["manager"]


class TestGrantFor:
    def test_unknown_role_is_empty_grant(self) -> None:
        assert DEFAULT_ROLE_PERMISSIONS.grant_for("intern") is NO_GRANT
        assert not NO_GRANT.covers(frozenset({"read:own"}))

    def test_missing_role_is_empty_grant(self) -> None:
        assert DEFAULT_ROLE_PERMISSIONS.grant_for(None) is NO_GRANT

    def test_empty_grant_covers_empty_requirement(self) -> None:
        assert NO_GRANT.covers(frozenset())

    def test_all_grant_covers_anything(self) -> None:
        assert ALL.covers(frozenset({"read:own", "something:new"}))


class TestConstruction:
    def test_missing_role_rejected(self) -> None:
        with pytest.raises(ValueError, match="moderator"):
            RolePermissionTable({
                Role.USER: [Permission.READ_OWN],
                Role.MANAGER: [],
                Role.ADMIN: ALL,
                Role.SUPERADMIN: ALL,
            })

    def test_extra_roles_allowed(self) -> None:
        table = RolePermissionTable({
            **{role: [] for role in Role},
            "auditor": ["read:all"],
        })
        assert table.grant_for("auditor").permissions == {"read:all"}

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_ROLE_PERMISSIONS["user"] = ALL  # type: ignore[index]

    def test_describe_uses_star_for_all(self) -> None:
        described = DEFAULT_ROLE_PERMISSIONS.describe()
        assert described["admin"] == ["*"]
        assert described["user"] == ["read:own", "update:own"]


class TestReplaceRoleTable:
    def test_swaps_whole_table(self) -> None:
        new_table = RolePermissionTable({role: ALL for role in Role})
        previous = replace_role_table(new_table)
        try:
            assert get_role_table() is new_table
            assert previous is DEFAULT_ROLE_PERMISSIONS
        finally:
            replace_role_table(previous)
        assert get_role_table() is DEFAULT_ROLE_PERMISSIONS

    def test_rejects_plain_mapping(self) -> None:
        with pytest.raises(TypeError):
            replace_role_table({"user": ALL})  # type: ignore[arg-type]
