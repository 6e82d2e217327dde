"""Shared fixtures.

Guard tests swap the caller store for an in-memory fake through
dependency_overrides. Route tests that need real persistence get a temporary
SQLite database.
"""

from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import jwt
import pytest
from fastapi.testclient import TestClient

from app.core import config
from app.core.database.engine import create_tables, get_db, make_engine, make_session_factory
from app.features.permissions.exceptions import CallerLookupError
from app.features.permissions.schemas import Caller
from app.features.users.dependencies import get_users_repository
from app.features.users.models import User
from app.main import app

TEST_JWT_SECRET = "test-secret-key-with-enough-length-for-hs256"


# ============================================================================
# Fakes
# ============================================================================


class FakeUsersRepository:
    """In-memory stand-in for UsersRepository.get_by_id."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.lookups: list[str] = []
        self.error: Exception | None = None
        # ids whose lookup fails while others still resolve
        self.failing_ids: set[str] = set()

    def add(
        self,
        user_id: str,
        role: str | None = "user",
        permissions=None,
        email: str | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            name=user_id,
            role=role,
            permissions=permissions,
            is_active=is_active,
        )
        self.users[user_id] = user
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        self.lookups.append(user_id)
        if self.error is not None:
            raise self.error
        if str(user_id) in self.failing_ids:
            raise CallerLookupError(f"lookup of {user_id} failed")
        return self.users.get(str(user_id))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def jwt_settings(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setattr(config, "JWT_ALGORITHM", "HS256")


@pytest.fixture
def make_token():
    def _make(user_id: str | None, expires_in: timedelta = timedelta(hours=1), **claims) -> str:
        payload = {"exp": datetime.now(UTC) + expires_in, **claims}
        if user_id is not None:
            payload["userId"] = user_id
        return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def make_caller():
    def _make(user_id: str = "caller-1", role: str | None = "user", permissions=None, email: str = "") -> Caller:
        return Caller(id=user_id, email=email or f"{user_id}@example.com", role=role, permissions=permissions)

    return _make


@pytest.fixture
def users_store() -> FakeUsersRepository:
    store = FakeUsersRepository()
    store.add("user-1", role="user")
    store.add("moderator-1", role="moderator")
    store.add("manager-1", role="manager")
    store.add("admin-1", role="admin")
    store.add("superadmin-1", role="superadmin")
    return store


@pytest.fixture
def client(users_store):
    app.dependency_overrides[get_users_repository] = lambda: users_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def db_session_factory(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    asyncio.run(create_tables(engine))
    try:
        yield make_session_factory(engine)
    finally:
        asyncio.run(engine.dispose())


@pytest.fixture
def seed_users(db_session_factory):
    """Insert users into the test database. Takes (id, role, permissions) tuples."""

    def _seed(*rows: tuple[str, str, list[str] | None]) -> None:
        async def _insert() -> None:
            async with db_session_factory() as session:
                for user_id, role, permissions in rows:
                    session.add(
                        User(
                            id=user_id,
                            email=f"{user_id}@example.com",
                            name=user_id,
                            role=role,
                            permissions=permissions,
                            is_active=True,
                        )
                    )
                await session.commit()

        asyncio.run(_insert())

    return _seed


@pytest.fixture
def db_client(db_session_factory):
    async def _get_test_db():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def failing_store(users_store) -> FakeUsersRepository:
    users_store.error = CallerLookupError("connection refused")
    return users_store
