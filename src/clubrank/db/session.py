# src/clubrank/db/session.py

"""Async engine, session factory and the FastAPI session dependency."""
import logging
import os
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./clubrank.db")


def _engine_options(url: str) -> dict[str, Any]:
    """Engine keyword arguments for ``url``, read from the DB_* variables."""
    options: dict[str, Any] = {
        "echo": os.getenv("DB_ECHO", "false").lower() == "true",
    }
    # aiosqlite has no connection pool to tune
    if not url.startswith("sqlite"):
        options.update(
            pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Rating writes flush explicitly while holding the write lock
AsyncSessionLocal = async_sessionmaker(
    bind=engine, autoflush=False, expire_on_commit=False
)


async def create_tables(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready", extra={"url": bind.url.render_as_string()})


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request, rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Rolling back request session: %s", e)
            await session.rollback()
            raise
