"""
Group planner.

Chooses between chapter-based grouping (with topic sub-clusters inside
large chapters) and plain topic clustering, and assigns every group its
share of the requested item total.

Dependencies: study_engine.core.clustering, pydantic
System role: Produces the generation groups for a study set
"""

import logging

from pydantic import BaseModel

from study_engine.configs.clustering import ClusteringSettings
from study_engine.configs.grouping import GroupingSettings
from study_engine.core.clustering import ClusterWorker, choose_cluster_count
from study_engine.core.exceptions import ContentError
from study_engine.core.grouping.chapter_grouper import group_chunks_by_chapter
from study_engine.core.grouping.distribution import balance_targets, distribute_targets
from study_engine.core.models import ChapterGroup, Chunk, TopicGroup

logger = logging.getLogger(__name__)


class GroupingPlan(BaseModel):
    """Generation groups and the strategy that produced them."""

    groups: list[TopicGroup]
    chapter_mode: bool

    @property
    def total_target(self) -> int:
        return sum(g.target_count for g in self.groups)


class GroupPlanner:
    """Build generation groups for a set of chunks."""

    def __init__(
        self,
        cluster_worker: ClusterWorker,
        grouping_settings: GroupingSettings | None = None,
        clustering_settings: ClusteringSettings | None = None,
    ) -> None:
        """
        Initialize planner.

        Args:
            cluster_worker: Worker running topic clustering off the event loop
            grouping_settings: Chapter grouping thresholds
            clustering_settings: Cluster count derivation
        """
        self.cluster_worker = cluster_worker
        self.grouping_settings = grouping_settings or GroupingSettings()
        self.clustering_settings = clustering_settings or ClusteringSettings()

    async def plan(self, chunks: list[Chunk], requested_total: int) -> GroupingPlan:
        """
        Partition chunks into groups whose targets sum to the requested total.

        Args:
            chunks: Chunks of the selected materials
            requested_total: Number of items requested

        Returns:
            GroupingPlan: Groups with non-zero targets

        Raises:
            ContentError: When there are no chunks
            ValueError: When requested_total is below 1
        """
        if not chunks:
            raise ContentError("No content chunks to plan generation from")
        if requested_total < 1:
            raise ValueError("requested_total must be at least 1")

        chapters = group_chunks_by_chapter(chunks, self.grouping_settings)
        if chapters and len(chapters) > 1:
            logger.info(f"{__name__}:plan - Detected {len(chapters)} chapters, discovering topics within each")
            groups = await self._plan_chapters(chapters, requested_total)
            chapter_mode = True
        else:
            logger.info(f"{__name__}:plan - No usable chapter structure, clustering {len(chunks)} chunks")
            groups = await self._plan_topics(chunks, requested_total)
            chapter_mode = False

        targets = balance_targets(
            [g.target_count for g in groups],
            [len(g.chunks) for g in groups],
            requested_total,
        )
        for group, target in zip(groups, targets):
            group.target_count = target
        groups = [g for g in groups if g.target_count > 0]

        for group in groups:
            logger.info(f"{__name__}:plan - {group.label}: {group.target_count} items from {len(group.chunks)} chunks")
        return GroupingPlan(groups=groups, chapter_mode=chapter_mode)

    async def _plan_chapters(self, chapters: list[ChapterGroup], total: int) -> list[TopicGroup]:
        """Distribute across chapters, then across topics inside large chapters."""
        targets = distribute_targets([len(c.chunks) for c in chapters], total)
        groups: list[TopicGroup] = []

        for chapter, target in zip(chapters, targets):
            if target == 0:
                continue
            if len(chapter.chunks) < self.grouping_settings.min_chunks_for_subclustering:
                groups.append(self._chapter_group(chapter, chapter.chunks, None, target))
                continue

            k = choose_cluster_count(len(chapter.chunks), self.clustering_settings)
            topics = await self.cluster_worker.cluster(chapter.chunks, k)
            if len(topics) == 1:
                groups.append(self._chapter_group(chapter, topics[0].chunks, topics[0].centroid, target))
                continue

            topic_targets = distribute_targets([len(t.chunks) for t in topics], target)
            for number, (topic, topic_target) in enumerate(zip(topics, topic_targets), start=1):
                groups.append(
                    TopicGroup(
                        chunks=topic.chunks,
                        centroid=topic.centroid,
                        target_count=topic_target,
                        label=f"{chapter.chapter_title} - Topic {number}",
                        chapter=chapter.chapter,
                        chapter_title=chapter.chapter_title,
                        topic_index=number,
                    )
                )
        return groups

    async def _plan_topics(self, chunks: list[Chunk], total: int) -> list[TopicGroup]:
        """Cluster all chunks and distribute across the clusters."""
        k = choose_cluster_count(len(chunks), self.clustering_settings)
        clusters = await self.cluster_worker.cluster(chunks, k)
        logger.info(f"{__name__}:_plan_topics - Discovered {len(clusters)} topic clusters from {len(chunks)} chunks")

        targets = distribute_targets([len(c.chunks) for c in clusters], total)
        return [
            TopicGroup(
                chunks=cluster.chunks,
                centroid=cluster.centroid,
                target_count=target,
                label=f"Topic {number}",
                topic_index=number,
            )
            for number, (cluster, target) in enumerate(zip(clusters, targets), start=1)
        ]

    @staticmethod
    def _chapter_group(
        chapter: ChapterGroup,
        chunks: list[Chunk],
        centroid: list[float] | None,
        target: int,
    ) -> TopicGroup:
        return TopicGroup(
            chunks=chunks,
            centroid=centroid,
            target_count=target,
            label=chapter.chapter_title,
            chapter=chapter.chapter,
            chapter_title=chapter.chapter_title,
        )
