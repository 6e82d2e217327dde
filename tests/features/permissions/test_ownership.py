"""Unit tests for ownership resolution."""

from __future__ import annotations

from starlette.requests import Request

from app.features.permissions.ownership import extract_target_id, resolve_ownership


def make_request(path_params: dict) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [], "path_params": path_params})


class TestResolveOwnership:
    def test_matching_id(self, make_caller) -> None:
        assert resolve_ownership(make_caller("user-1"), "user-1")

    def test_different_id(self, make_caller) -> None:
        assert not resolve_ownership(make_caller("user-1"), "user-2")

    def test_missing_target(self, make_caller) -> None:
        assert not resolve_ownership(make_caller("user-1"), None)
        assert not resolve_ownership(make_caller("user-1"), "")

    def test_compares_textual_form(self, make_caller) -> None:
        caller = make_caller(42)
        assert caller.id == "42"
        assert resolve_ownership(caller, 42)
        assert resolve_ownership(caller, "42")

    def test_comparison_is_exact(self, make_caller) -> None:
        assert not resolve_ownership(make_caller("User-1"), "user-1")
        assert not resolve_ownership(make_caller("user-1"), " user-1")


class TestExtractTargetId:
    def test_prefers_user_id(self) -> None:
        assert extract_target_id(make_request({"user_id": "a", "id": "b"})) == "a"

    def test_falls_back_to_id(self) -> None:
        assert extract_target_id(make_request({"id": "b"})) == "b"

    def test_none_without_params(self) -> None:
        assert extract_target_id(make_request({})) is None
