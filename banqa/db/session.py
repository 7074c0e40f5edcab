"""Async database session management using SQLAlchemy."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from banqa.core.config import get_settings

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_async_engine() -> AsyncEngine:
    """Return the process-wide async database engine.

    Uses asyncpg driver for PostgreSQL. The engine owns the connection
    pool, so it is built once and reused.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.DEBUG,
            pool_pre_ping=True,
        )
    return _engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the async session maker bound to the shared engine."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_maker


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides an async database session.

    Yields an async session and ensures proper cleanup after use.
    Use this as a FastAPI dependency for database operations.
    """
    async_session_maker = get_async_session_maker()
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
