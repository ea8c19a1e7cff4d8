"""
Chapter grouping.

Groups chunks by (material, chapter) and rejects degenerate chapter
structures so the caller can fall back to topic clustering.

Dependencies: None (pure domain logic)
System role: Structural partitioning strategy ahead of generation
"""

import logging

from study_engine.configs.grouping import GroupingSettings
from study_engine.core.models import ChapterGroup, Chunk

logger = logging.getLogger(__name__)

UNLABELED_CHAPTER_TITLE = "Main Content"


def group_chunks_by_chapter(
    chunks: list[Chunk],
    settings: GroupingSettings | None = None,
) -> list[ChapterGroup] | None:
    """
    Group chunks by chapter.

    Chunks without a chapter number (or titled "Main Content") are
    unlabeled and collected into a trailing general group, chapter 0.

    Args:
        chunks: Chunks with chapter metadata
        settings: Unlabeled and dominance thresholds

    Returns:
        list[ChapterGroup] | None: Groups sorted by chapter number, or None
            when chapters are mostly missing or one group dominates
    """
    settings = settings or GroupingSettings()
    if not chunks:
        return None

    groups: dict[tuple[str, int], ChapterGroup] = {}
    unlabeled: list[Chunk] = []
    for chunk in chunks:
        chapter = chunk.metadata.chapter
        title = chunk.metadata.chapter_title or f"Chapter {chapter}"
        if not chapter or title == UNLABELED_CHAPTER_TITLE:
            unlabeled.append(chunk)
            continue
        key = (chunk.material_id, chapter)
        if key not in groups:
            groups[key] = ChapterGroup(material_id=chunk.material_id, chapter=chapter, chapter_title=title)
        groups[key].chunks.append(chunk)

    ordered = sorted(groups.values(), key=lambda g: g.chapter)
    total = len(chunks)

    if unlabeled:
        if len(unlabeled) >= total * settings.unlabeled_threshold:
            logger.info(
                f"{__name__}:group_chunks_by_chapter - {len(unlabeled)}/{total} chunks are "
                f"unstructured, falling back to topic clustering"
            )
            return None
        ordered.append(
            ChapterGroup(
                material_id=unlabeled[0].material_id,
                chapter=0,
                chapter_title=settings.general_group_title,
                chunks=unlabeled,
            )
        )

    if any(len(g.chunks) > total * settings.dominant_threshold for g in ordered):
        logger.info(
            f"{__name__}:group_chunks_by_chapter - Dominant chapter detected "
            f"(>{settings.dominant_threshold:.0%} of content), falling back to topic clustering"
        )
        return None

    return ordered
