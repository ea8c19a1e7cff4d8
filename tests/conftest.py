"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, chunk and group factories, seeded
random source
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import random
from typing import Callable

import pytest

from study_engine.core.models import Chunk, ChunkMetadata, TopicGroup

LOREM = (
    "The derivative measures how a function changes as its input changes. "
    "It is defined as the limit of the difference quotient and underpins the "
    "study of rates, slopes and optimization problems across the sciences."
)


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from study_engine.boundary.db.base import Base
    import study_engine.boundary.db.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def make_chunk() -> Callable[..., Chunk]:
    """
    Factory building chunks with readable default content.

    Returns:
        Callable: make_chunk(index, material_id=..., chapter=..., embedding=..., content=...)
    """

    def _make(
        index: int,
        material_id: str = "material-1",
        chapter: int | None = None,
        chapter_title: str | None = None,
        embedding: list[float] | None = None,
        content: str | None = None,
        has_math: bool = False,
    ) -> Chunk:
        return Chunk.create(
            material_id=material_id,
            index=index,
            content=content or f"Passage {index}. {LOREM}",
            has_math=has_math,
            embedding=embedding,
            metadata=ChunkMetadata(chapter=chapter, chapter_title=chapter_title),
        )

    return _make


@pytest.fixture
def make_group(make_chunk) -> Callable[..., TopicGroup]:
    """Factory building a topic group of n chunks with a target count."""

    def _make(
        size: int,
        target: int,
        label: str = "Topic 1",
        start: int = 0,
        chapter: int | None = None,
        chapter_title: str | None = None,
    ) -> TopicGroup:
        return TopicGroup(
            chunks=[make_chunk(start + i) for i in range(size)],
            target_count=target,
            label=label,
            chapter=chapter,
            chapter_title=chapter_title,
        )

    return _make


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(7)
