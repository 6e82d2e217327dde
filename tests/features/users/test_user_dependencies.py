"""Tests for bearer token handling in the users dependencies."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from app.core import config


class TestAuthenticate:
    def test_valid_token(self, client, auth_headers) -> None:
        response = client.get("/permissions/me", headers=auth_headers("moderator-1"))
        assert response.status_code == 200
        assert response.json()["user_id"] == "moderator-1"

    def test_expired_token(self, client, make_token) -> None:
        token = make_token("user-1", expires_in=timedelta(minutes=-5))
        response = client.get("/permissions/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_wrong_signature(self, client) -> None:
        token = jwt.encode({"userId": "admin-1"}, "another-secret-key-with-enough-length", algorithm="HS256")
        response = client.get("/permissions/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"].startswith("Invalid token")

    def test_missing_user_claim(self, client, make_token, users_store) -> None:
        response = client.get("/permissions/me", headers={"Authorization": f"Bearer {make_token(None)}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token payload"
        assert users_store.lookups == []

    def test_no_header_reaches_guard(self, client, users_store) -> None:
        response = client.get("/permissions/me")
        assert response.status_code == 401
        assert response.json() == {"message": "Authentication required"}
        assert users_store.lookups == []


class TestCurrentUser:
    def test_me_requires_authentication(self, client) -> None:
        response = client.get("/users/me")
        assert response.status_code == 401
        assert response.json() == {"message": "Authentication required"}

    def test_me_unknown_user(self, client, auth_headers) -> None:
        response = client.get("/users/me", headers=auth_headers("ghost"))
        assert response.status_code == 401
        assert response.json() == {"message": "User not found"}


class TestMissingSecret:
    def test_unset_secret_is_structured_500(self, client, make_token, users_store, monkeypatch) -> None:
        token = make_token("user-1")
        monkeypatch.setattr(config, "JWT_SECRET", "")
        monkeypatch.setattr(config, "ENVIRONMENT", "production")

        response = client.get("/permissions/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 500
        assert response.json() == {"message": "Permission check failed", "error": "Internal server error"}
        assert users_store.lookups == []

    def test_startup_rejects_unset_secret(self, monkeypatch) -> None:
        monkeypatch.setattr(config, "JWT_SECRET", "")
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            config.validate_settings()

    def test_startup_accepts_configured_secret(self) -> None:
        config.validate_settings()


class TestTargetLookupFailure:
    def test_store_error_on_target_is_structured_500(self, client, users_store, auth_headers, monkeypatch) -> None:
        monkeypatch.setattr(config, "ENVIRONMENT", "development")
        users_store.failing_ids.add("broken-1")

        response = client.get("/users/broken-1", headers=auth_headers("manager-1"))
        assert response.status_code == 500
        assert response.json() == {
            "message": "Permission check failed",
            "error": "Failed to fetch user: lookup of broken-1 failed",
        }
