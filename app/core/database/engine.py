"""
Async engine and session management.

The engine is built from DATABASE_URL at import time. SQLite URLs get a NullPool
so every session opens its own aiosqlite connection on the running loop.
"""
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core import config
from app.utils import get_logger


log = get_logger(__name__)


def make_engine(url: str) -> AsyncEngine:
    """Create an async engine for the given database URL."""
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["poolclass"] = NullPool
    return create_async_engine(url, echo=False, future=True, **kwargs)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = make_engine(config.SQLALCHEMY_DATABASE_URL)
AsyncSessionLocal = make_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency yielding a session that commits on success.

    Usage in FastAPI routes:
        @router.get("/products")
        async def list_products(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(bind: AsyncEngine) -> None:
    """Create every table registered on Base.metadata."""
    from app.core.database.base import Base

    # Import all models to ensure they're registered with SQLAlchemy
    from app.features.users.models import User  # noqa: F401
    from app.features.products.models import Product  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """Create tables on the application engine. Called on startup."""
    log.info("Creating tables on %s", engine.url.render_as_string(hide_password=True))
    await create_tables(engine)
