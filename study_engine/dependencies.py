"""
Dependency wiring.

Factory functions assembling the services from settings. The study set
service is handed out through an async context manager that owns the
cluster worker pool and shuts it down on exit.

Dependencies: study_engine.configs, study_engine.application, study_engine.boundary, study_engine.core
System role: Composition root for service construction
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.application.services import IngestionService, StudySetService
from study_engine.boundary.embeddings import EmbeddingClient, LangChainEmbeddingClient
from study_engine.boundary.llm import LangChainTextGenerationClient, TextGenerationClient
from study_engine.configs import Settings, get_settings
from study_engine.core.clustering import ClusterWorker
from study_engine.core.dedup import Deduplicator
from study_engine.core.generation import GenerationOrchestrator, SetGenerator
from study_engine.core.grouping import GroupPlanner


def get_text_client(settings: Settings | None = None) -> TextGenerationClient:
    """Gemini text client; models are built on first call."""
    settings = settings or get_settings()
    return LangChainTextGenerationClient(settings.llm)


def get_embedding_client(settings: Settings | None = None) -> EmbeddingClient:
    """Gemini embedding client; embeddings are built on first call."""
    settings = settings or get_settings()
    return LangChainEmbeddingClient(settings=settings.llm)


def get_ingestion_service(
    db: AsyncSession,
    settings: Settings | None = None,
    embedding_client: EmbeddingClient | None = None,
) -> IngestionService:
    """
    Get ingestion service instance.

    Args:
        db: Database session
        settings: Application settings (cached settings when None)
        embedding_client: Embedding client override

    Returns:
        IngestionService: Ingestion service instance
    """
    settings = settings or get_settings()
    return IngestionService(
        db,
        embedding_client or get_embedding_client(settings),
        settings=settings.chunking,
    )


def build_study_set_service(
    db: AsyncSession,
    cluster_worker: ClusterWorker,
    settings: Settings | None = None,
    text_client: TextGenerationClient | None = None,
    embedding_client: EmbeddingClient | None = None,
) -> StudySetService:
    """
    Assemble a study set service around an existing cluster worker.

    Args:
        db: Database session
        cluster_worker: Worker used by the group planner (caller owns it)
        settings: Application settings (cached settings when None)
        text_client: Text generation client override
        embedding_client: Embedding client override

    Returns:
        StudySetService: Study set service instance
    """
    settings = settings or get_settings()
    planner = GroupPlanner(cluster_worker, settings.grouping, settings.clustering)
    orchestrator = GenerationOrchestrator(text_client or get_text_client(settings), settings=settings.generation)
    deduplicator = Deduplicator(embedding_client or get_embedding_client(settings), settings.dedup)
    return StudySetService(db, planner, SetGenerator(orchestrator, deduplicator))


@asynccontextmanager
async def get_study_set_service(
    db: AsyncSession,
    settings: Settings | None = None,
    text_client: TextGenerationClient | None = None,
    embedding_client: EmbeddingClient | None = None,
) -> AsyncIterator[StudySetService]:
    """
    Get study set service instance with a cluster worker scoped to the block.

    Args:
        db: Database session
        settings: Application settings (cached settings when None)
        text_client: Text generation client override
        embedding_client: Embedding client override

    Yields:
        StudySetService: Study set service instance
    """
    settings = settings or get_settings()
    async with ClusterWorker(settings.clustering) as worker:
        yield build_study_set_service(db, worker, settings, text_client, embedding_client)
