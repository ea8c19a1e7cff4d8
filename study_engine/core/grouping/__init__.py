"""Chapter grouping, proportional distribution and group planning."""

from study_engine.core.grouping.chapter_grouper import group_chunks_by_chapter
from study_engine.core.grouping.distribution import balance_targets, distribute_targets
from study_engine.core.grouping.planner import GroupingPlan, GroupPlanner

__all__ = [
    "GroupPlanner",
    "GroupingPlan",
    "balance_targets",
    "distribute_targets",
    "group_chunks_by_chapter",
]
