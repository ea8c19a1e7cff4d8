"""
Study set generator.

Orchestrates generation, removes near-duplicates and truncates to the
requested total.

Dependencies: study_engine.core.generation, study_engine.core.dedup
System role: Produces a GeneratedSet from planned groups
"""

import logging
import time
from datetime import datetime, timezone

from study_engine.core.dedup import Deduplicator
from study_engine.core.exceptions import ContentError
from study_engine.core.generation.orchestrator import GenerationOrchestrator
from study_engine.core.grouping.distribution import distribute_targets
from study_engine.core.models import (
    Difficulty,
    GeneratedSet,
    GenerationStats,
    ItemType,
    SetKind,
    TopicGroup,
)

logger = logging.getLogger(__name__)


def default_set_name(kind: SetKind) -> str:
    label = "Flashcards" if kind == SetKind.FLASHCARDS else "Quiz"
    return f"{label} - {datetime.now(timezone.utc).date().isoformat()}"


def assign_targets(groups: list[TopicGroup], requested_total: int) -> list[TopicGroup]:
    """
    Make group targets sum to the requested total.

    Groups whose targets already sum to ``requested_total`` are returned
    as they are. Otherwise targets are redistributed in proportion to
    group size and groups left with a zero target are dropped.

    Args:
        groups: Groups, targets possibly unset
        requested_total: Number of items the set should hold

    Returns:
        list[TopicGroup]: Groups whose targets sum to requested_total
    """
    if sum(g.target_count for g in groups) == requested_total:
        return groups

    targets = distribute_targets([len(g.chunks) for g in groups], requested_total)
    assigned = [
        group.model_copy(update={"target_count": target})
        for group, target in zip(groups, targets)
        if target > 0
    ]
    logger.info(f"{__name__}:assign_targets - Redistributed {requested_total} items over {len(assigned)} groups")
    return assigned


class SetGenerator:
    """Generate, deduplicate and truncate a study set."""

    def __init__(self, orchestrator: GenerationOrchestrator, deduplicator: Deduplicator) -> None:
        """
        Initialize set generator.

        Args:
            orchestrator: Generation orchestrator
            deduplicator: Near-duplicate filter
        """
        self.orchestrator = orchestrator
        self.deduplicator = deduplicator

    async def generate_set(
        self,
        groups: list[TopicGroup],
        item_type: ItemType,
        requested_total: int,
        difficulty: Difficulty = Difficulty.MEDIUM,
        chapter_mode: bool = False,
        name: str | None = None,
        description: str | None = None,
    ) -> GeneratedSet:
        """
        Generate a study set.

        Args:
            groups: Groups; targets are redistributed unless they sum to requested_total
            item_type: Item type to generate
            requested_total: Maximum number of items in the set
            difficulty: Difficulty profile
            chapter_mode: Whether groups come from chapter grouping
            name: Set name (dated default when None)
            description: Optional description

        Returns:
            GeneratedSet: At most requested_total unique items

        Raises:
            ContentError: When there are no groups to generate from
            GenerationError: When no items were generated
        """
        groups = assign_targets(groups, requested_total)
        if not groups:
            raise ContentError("No groups to generate from")

        start = time.perf_counter()
        result = await self.orchestrator.run(groups, item_type, difficulty, chapter_mode)
        generation_time_ms = (time.perf_counter() - start) * 1000

        unique_items = await self.deduplicator.deduplicate(result.items)
        final_items = unique_items[:requested_total]
        kind = SetKind.FLASHCARDS if item_type == ItemType.FLASHCARD else SetKind.QUIZ

        logger.info(
            f"{__name__}:generate_set - {result.total_generated} generated, "
            f"{len(unique_items)} unique, {len(final_items)} kept in {generation_time_ms:.0f}ms"
        )
        return GeneratedSet(
            name=name or default_set_name(kind),
            kind=kind,
            item_type=item_type,
            difficulty=difficulty,
            items=final_items,
            description=description,
            stats=GenerationStats(
                groups_used=len(groups),
                generation_time_ms=generation_time_ms,
                total_generated=result.total_generated,
                after_dedup=len(unique_items),
                chapter_mode=chapter_mode,
                failed_tasks=result.failed_tasks,
            ),
        )
