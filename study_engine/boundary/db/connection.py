"""
Database connection management.

Engine and session factories for the study store.

Dependencies: sqlalchemy, study_engine.configs
System role: Connection lifecycle for services and table management
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from study_engine.configs import get_settings
from study_engine.configs.database import DatabaseSettings

logger = logging.getLogger(__name__)


def get_async_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create the async engine.

    Pool sizing applies to server databases only; SQLite URLs use
    SQLAlchemy's default pool for the dialect.

    Args:
        settings: Connection settings (application settings when None)

    Returns:
        AsyncEngine: Engine with pre-ping enabled
    """
    db_config = settings or get_settings().database
    kwargs: dict[str, Any] = {"echo": db_config.echo_sql, "pool_pre_ping": True}
    if not db_config.is_sqlite:
        kwargs.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
        )
    logger.info(f"{__name__}:get_async_engine - Creating engine (sqlite={db_config.is_sqlite})")
    return create_async_engine(db_config.async_database_url, **kwargs)


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to an engine.

    Sessions neither autoflush nor expire on commit, so stored rows stay
    readable after the store commits.
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
