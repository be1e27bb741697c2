"""
Database configuration.

Async SQLAlchemy engine and session factory shared by the API and scheduler.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from indexer.config.settings import settings
from indexer.models.base import Base


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create async engine for the configured database."""
    url = database_url or settings.database_url
    kwargs: dict = {"echo": settings.database_echo}
    if url.startswith("postgresql"):
        kwargs["pool_pre_ping"] = True
    return create_async_engine(url, **kwargs)


def create_session_maker(
    bind: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to an engine."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine()
async_session_maker = create_session_maker(engine)


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.info("Database tables created/verified")


async def dispose_engine() -> None:
    """Close pooled database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
