"""Async database engine, session factory, and lifespan management.

PostgreSQL through SQLAlchemy 2.0 async (asyncpg) holds every quote, client
and invoice. Redis only holds the document number counters, so the app
starts without it and number allocation fails until it comes back.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from devispro.config import settings

logger = logging.getLogger(__name__)

# ── PostgreSQL ───────────────────────────────────────────────────────

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    pool_size=settings.db.pool_size,
    max_overflow=settings.db.max_overflow,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. One request is one transaction.

    Services only flush; the commit happens here once the handler returned,
    so a 4xx raised half-way through a quote edit leaves nothing behind.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Redis (document sequences) ───────────────────────────────────────

redis_client: aioredis.Redis = aioredis.from_url(settings.db.redis_url, decode_responses=True)


# ── Lifespan ─────────────────────────────────────────────────────────


async def init_db() -> None:
    """Check PostgreSQL, create tables in development, and ping Redis."""
    from devispro.models import Base

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if settings.db.create_tables and not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables checked (%d)", len(Base.metadata.tables))

    try:
        await redis_client.ping()
    except RedisError as e:
        logger.warning("Redis unreachable at startup, numbering unavailable: %s", e)


async def close_db() -> None:
    await engine.dispose()
    await redis_client.aclose()


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Open and close the database and Redis around the app's lifetime."""
    await init_db()
    try:
        yield
    finally:
        await close_db()
