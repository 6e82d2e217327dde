"""Query helpers for ``User`` records."""
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.constants import Role
from app.features.permissions.exceptions import CallerLookupError
from app.features.users.models import User


def _canonical_email(value: str) -> str:
    return value.strip().lower()


class UsersRepository:
    """Persistence helpers for users. Also serves as the caller store for guards."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """
        Look up a user by id.

        Raises:
            CallerLookupError: the database could not be queried
        """
        try:
            result = await self._session.execute(select(User).where(User.id == str(user_id)))
        except SQLAlchemyError as e:
            raise CallerLookupError(str(e)) from e
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(User.email == _canonical_email(email))
        )
        return result.scalar_one_or_none()

    async def list_users(self, *, skip: int = 0, limit: int = 50) -> list[User]:
        result = await self._session.execute(
            select(User)
            .where(User.is_active.is_(True))
            .order_by(User.email)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(
        self,
        *,
        email: str,
        name: str,
        role: str = Role.USER.value,
        permissions: Optional[list[str]] = None,
    ) -> User:
        user = User(
            email=_canonical_email(email),
            name=name,
            role=role,
            permissions=permissions,
            is_active=True,
        )
        self._session.add(user)
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def update(self, user: User, **fields: Any) -> User:
        for key, value in fields.items():
            setattr(user, key, value)
        await self._session.flush()
        await self._session.refresh(user)
        return user
