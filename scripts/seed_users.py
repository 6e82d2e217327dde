"""
Seed script creating one user per role.

Run this after configuring DATABASE_URL to get accounts for trying out the
permission guards:
- user@example.com       role user
- moderator@example.com  role moderator
- manager@example.com    role manager
- admin@example.com      role admin
- superadmin@example.com role superadmin

Usage:
    uv run python -m scripts.seed_users
"""
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db
from app.features.permissions.constants import Role
from app.features.permissions.roles import get_role_table
from app.features.users.models import User
from app.features.users.repository import UsersRepository
from app.utils import get_logger


log = get_logger(__name__)


DEFAULT_USERS = [
    (f"{role.value}@example.com", f"Default {role.value}", role.value)
    for role in Role
]


async def seed_users(db: AsyncSession) -> list[User]:
    """
    Create the default users, skipping any whose email already exists.

    Returns:
        The default users, existing or new
    """
    users = UsersRepository(db)
    seeded = []

    for email, name, role in DEFAULT_USERS:
        existing = await users.get_by_email(email)
        if existing:
            log.debug(f"User '{email}' already exists, skipping")
            seeded.append(existing)
            continue

        user = await users.create(email=email, name=name, role=role)
        log.info(f"Created user {email} with role '{role}' (id={user.id})")
        seeded.append(user)

    await db.commit()
    return seeded


def summarize(users: list[User]) -> list[str]:
    """One line per user with the permissions its role grants."""
    role_table = get_role_table().describe()
    return [
        f"{user.email} ({user.id}): {', '.join(role_table.get(user.role, [])) or 'no role permissions'}"
        for user in users
    ]


async def main():
    log.info("Starting user seeding...")
    await init_db()

    async for db in get_db():
        try:
            seeded = await seed_users(db)
        except Exception as e:
            log.error(f"Error seeding users: {e}", exc_info=True)
            raise

        log.info("User seeding completed successfully!")
        for line in summarize(seeded):
            log.info(f"  - {line}")
        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
