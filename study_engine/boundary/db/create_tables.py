"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, study_engine.configs
System role: Database schema initialization

Usage:
    python -m study_engine.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from study_engine.boundary.db.base import Base
from study_engine.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from study_engine.boundary.db.models.chunk_model import MaterialChunkModel  # noqa: F401
from study_engine.boundary.db.models.set_model import GeneratedItemModel, GeneratedSetModel  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables remain unchanged.

    Args:
        engine: Target engine (configured engine when None)
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all_tables - Tables created: {', '.join(Base.metadata.tables)}")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info(f"{__name__}:drop_all_tables - All tables dropped")


if __name__ == "__main__":
    from study_engine.configs import get_settings
    from study_engine.observability import configure_logging

    configure_logging(get_settings().database.effective_log_level)
    asyncio.run(create_all_tables())
