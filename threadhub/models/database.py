"""
threadhub.models.database - Engine and Session Factory

The API process owns one engine for its lifetime (see api.main.lifespan);
each request gets its own AsyncSession from the factory.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from threadhub.settings import ThreadhubSettings, get_settings


def get_engine(settings: ThreadhubSettings | None = None) -> AsyncEngine:
    """
    Create the async engine for DATABASE_URL.

    Pool sizing comes from THREADHUB_DB_POOL_SIZE / THREADHUB_DB_MAX_OVERFLOW.
    """
    settings = settings or get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


def get_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; loaded rows stay usable after the session closes."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
