import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(url: str) -> AsyncEngine:
    """
    Create the async engine for a database URL.
    Development runs without connection pooling so schema changes are
    picked up by every new session.
    :param url: Async SQLAlchemy URL.
    :return: Configured engine; no connection is opened yet.
    """
    options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if settings.ENVIRONMENT == "development":
        options["poolclass"] = NullPool
    return create_async_engine(url, **options)


engine = build_engine(settings.DATABASE_URL)

# Objects stay readable after commit; responses are built from them
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. Anything left uncommitted when the request
    fails is rolled back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create missing tables for every registered model."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Ensured {len(Base.metadata.tables)} tables exist")


async def check_database_connection() -> bool:
    """
    Round-trip a trivial query.
    :return: True if the database answered, False otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
