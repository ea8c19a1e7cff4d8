"""
Material ingestion service.

Sanitizes raw material text, classifies it, chunks it with the matching
chunker, embeds every chunk in one batch and stores the result.

Dependencies: study_engine.core.chunking, study_engine.boundary
System role: Entry point turning uploaded text into stored, embedded chunks
"""

import logging
import re
import time
import unicodedata

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.boundary.db.store import SqlAlchemyStudyStore, StudyStore
from study_engine.boundary.embeddings import EmbeddingClient
from study_engine.configs.chunking import ChunkingSettings
from study_engine.core.chunking import chunk_text, detect_stem_content
from study_engine.core.exceptions import ContentError, EmbeddingError

logger = logging.getLogger(__name__)

CONTROL_CHARS = re.compile(r"[\x01-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_text(text: str) -> str:
    """Remove NUL and control characters (keeping tab/newline/CR) and NFC-normalize."""
    cleaned = CONTROL_CHARS.sub("", text.replace("\x00", ""))
    return unicodedata.normalize("NFC", cleaned)


class IngestionResult(BaseModel):
    """Outcome of ingesting one material."""

    material_id: str
    chunk_count: int = Field(ge=0)
    is_stem: bool
    stem_confidence: int = Field(ge=0, le=100)
    processing_time_ms: float = Field(ge=0)


class IngestionService:
    """
    Material ingestion orchestrator.

    Coordinates sanitizing, chunking, embedding and storage of a single
    material's text.
    """

    def __init__(
        self,
        db: AsyncSession,
        embedding_client: EmbeddingClient,
        settings: ChunkingSettings | None = None,
        store: StudyStore | None = None,
    ) -> None:
        """
        Initialize ingestion service.

        Args:
            db: AsyncSession for database operations
            embedding_client: Embeds chunk contents
            settings: Chunking settings
            store: Chunk store (SQLAlchemy store over db when None)
        """
        self.db = db
        self.embedding_client = embedding_client
        self.settings = settings or ChunkingSettings()
        self.store = store or SqlAlchemyStudyStore(db)

    async def ingest(self, material_id: str, text: str) -> IngestionResult:
        """
        Chunk, embed and store material text.

        Args:
            material_id: Material identifier
            text: Raw extracted text

        Returns:
            IngestionResult: Chunk count, classification and timing

        Raises:
            ContentError: When the text is empty or yields no chunks
            EmbeddingError: When the embedding batch fails or is incomplete
            StoreError: When storing fails
        """
        start = time.perf_counter()
        cleaned = sanitize_text(text or "")
        if not cleaned.strip():
            raise ContentError("Material has no text content", {"material_id": material_id})

        classification = detect_stem_content(cleaned, threshold=self.settings.stem_threshold)
        logger.info(
            f"{__name__}:ingest - Material {material_id}: "
            f"{'STEM' if classification.is_stem else 'non-STEM'} "
            f"(confidence {classification.confidence}%)"
        )

        chunks = chunk_text(cleaned, material_id, settings=self.settings, math_aware=classification.is_stem)
        if not chunks:
            raise ContentError("Material produced no chunks", {"material_id": material_id})

        vectors = await self.embedding_client.embed_batch([c.content for c in chunks])
        if len(vectors) != len(chunks):
            raise EmbeddingError(
                "Embedding count mismatch",
                {"material_id": material_id, "expected": len(chunks), "received": len(vectors)},
            )
        embedded = [chunk.model_copy(update={"embedding": vector}) for chunk, vector in zip(chunks, vectors)]

        await self.store.insert_material_chunks(embedded)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{__name__}:ingest - Material {material_id}: {len(embedded)} chunks in {elapsed_ms:.0f}ms")
        return IngestionResult(
            material_id=material_id,
            chunk_count=len(embedded),
            is_stem=classification.is_stem,
            stem_confidence=classification.confidence,
            processing_time_ms=elapsed_ms,
        )
