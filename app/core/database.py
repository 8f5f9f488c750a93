"""PostgreSQL engine and session handling for the cash card store.

Only the ``postgres`` backend touches this module; the in-memory backend
never creates an engine.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import DatabaseConfig

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Build the asyncpg engine backing ``CashCardRepository``."""
    engine = create_async_engine(
        config.async_url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
        connect_args={
            "server_settings": {"timezone": "UTC"},
            "timeout": 30,
        },
    )
    logger.info(
        "Cash card database engine created",
        extra={
            "host": config.host,
            "port": config.port,
            "database": config.name,
            "pool_size": config.pool_size,
        },
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Cards are returned as dicts after commit; nothing reloads them
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Return the process engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        from app.core.config import get_settings

        _engine = create_engine(get_settings().database)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def reset_engine() -> None:
    """Dispose the engine and forget the session factory.

    Runs at shutdown of a postgres-backed app and between tests.
    """
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Cash card database engine disposed")
    _engine = None
    _session_factory = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield the session behind one request's ``CashCardRepository``.

    A request's card operations commit together when the request succeeds
    and roll back together when it raises.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
