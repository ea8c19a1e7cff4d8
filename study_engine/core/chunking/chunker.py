"""
Chunker selection and chunk construction.

Dependencies: study_engine.core.chunking
System role: Entry point turning raw text into material chunks
"""

import logging

from study_engine.configs.chunking import ChunkingSettings
from study_engine.core.chunking.classifier import detect_stem_content
from study_engine.core.chunking.math_chunker import MathAwareChunker
from study_engine.core.chunking.simple_chunker import SimpleChunker
from study_engine.core.models import Chunk

logger = logging.getLogger(__name__)


def get_chunker(
    math_aware: bool,
    settings: ChunkingSettings | None = None,
) -> MathAwareChunker | SimpleChunker:
    """Return the math-aware chunker or the simple paragraph chunker."""
    if math_aware:
        return MathAwareChunker(settings)
    return SimpleChunker(settings)


def chunk_text(
    text: str,
    material_id: str,
    settings: ChunkingSettings | None = None,
    math_aware: bool | None = None,
) -> list[Chunk]:
    """
    Split material text into chunks with deterministic IDs.

    Args:
        text: Raw material text
        material_id: Owning material identifier
        settings: Chunking settings (defaults from environment)
        math_aware: Force a chunker; None classifies the text first

    Returns:
        list[Chunk]: Chunks indexed from 0, without embeddings
    """
    settings = settings or ChunkingSettings()
    if math_aware is None:
        classification = detect_stem_content(text, threshold=settings.stem_threshold)
        math_aware = classification.is_stem
        logger.info(
            f"{__name__}:chunk_text - Material {material_id} classified as "
            f"{'STEM' if classification.is_stem else 'non-STEM'} "
            f"(confidence: {classification.confidence}%, "
            f"indicators: {', '.join(classification.indicators) or 'none'})"
        )

    drafts = get_chunker(math_aware, settings).chunk(text)
    chunks = [
        Chunk.create(
            material_id=material_id,
            index=index,
            content=draft.content,
            content_type=draft.content_type,
            has_math=draft.has_math,
            metadata=draft.metadata,
        )
        for index, draft in enumerate(drafts)
    ]
    logger.info(f"{__name__}:chunk_text - Created {len(chunks)} chunks for material {material_id}")
    return chunks
