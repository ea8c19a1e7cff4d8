"""
Chunk selection for generation prompts.

Dependencies: re, random (stdlib)
System role: Picks representative and varied source chunks per task
"""

import random
import re

from study_engine.configs.generation import GenerationSettings
from study_engine.core.clustering import cosine_similarity
from study_engine.core.models import Chunk, TopicGroup

NUMBER_PATTERN = re.compile(r"\d+")
STANDALONE_NUMBER_PATTERN = re.compile(r"\b\d+\b")


def is_content_chunk(chunk: Chunk, min_chars: int = 50) -> bool:
    """False for indexes, tables of contents, page lists and fragments."""
    content = (chunk.content or "").lower()
    is_index = "index" in content and len(NUMBER_PATTERN.findall(content)) > 10
    is_toc = "table of contents" in content or "contents\n" in content
    is_page_list = len(STANDALONE_NUMBER_PATTERN.findall(content)) > 20
    is_too_short = len(content) < min_chars
    return not (is_index or is_toc or is_page_list or is_too_short)


def filter_content_chunks(chunks: list[Chunk], min_chars: int = 50) -> list[Chunk]:
    """
    Drop non-content chunks, falling back to every non-empty chunk.

    Args:
        chunks: Group chunks
        min_chars: Minimum content length

    Returns:
        list[Chunk]: Usable chunks
    """
    content_chunks = [c for c in chunks if is_content_chunk(c, min_chars)]
    if content_chunks:
        return content_chunks
    return [c for c in chunks if c.content]


def rank_by_centroid(chunks: list[Chunk], centroid: list[float] | None) -> list[Chunk]:
    """Order chunks by cosine similarity to the centroid, most similar first."""
    if not centroid:
        return list(chunks)

    def similarity(chunk: Chunk) -> float:
        if not chunk.embedding:
            return -1.0
        return cosine_similarity(chunk.embedding, centroid)

    return sorted(chunks, key=similarity, reverse=True)


def select_chunks(
    group: TopicGroup,
    settings: GenerationSettings,
    rng: random.Random,
) -> list[Chunk]:
    """
    Select prompt chunks for one task.

    Samples ``representative_count`` chunks from the ``top_pool_size`` most
    centroid-similar ones plus ``variety_count`` from the rest, so repeated
    tasks for a group see different material.

    Args:
        group: Group being generated for
        settings: Pool and sample sizes
        rng: Random source

    Returns:
        list[Chunk]: Representative chunks first, then variety chunks
    """
    ranked = rank_by_centroid(filter_content_chunks(group.chunks, settings.min_content_chars), group.centroid)
    top_pool = ranked[: settings.top_pool_size]
    top = rng.sample(top_pool, min(settings.representative_count, len(top_pool)))

    selected_ids = {c.id for c in top}
    remaining = [c for c in ranked if c.id not in selected_ids]
    variety = rng.sample(remaining, min(settings.variety_count, len(remaining)))
    return top + variety
