"""
Generation orchestrator.

Splits groups into bounded tasks, runs them concurrently under a
semaphore with per-call timeouts and the shared retry policy, and merges
the results back in group order with a per-group cap.

Dependencies: asyncio, pydantic, study_engine.boundary.llm
System role: Core of study set generation
"""

import asyncio
import logging
import math
import random

from pydantic import BaseModel

from study_engine.boundary.llm import TextGenerationClient
from study_engine.configs.generation import GenerationSettings
from study_engine.core.exceptions import (
    GenerationError,
    ProviderTimeoutError,
    ResponseParseError,
    StudyEngineException,
)
from study_engine.core.generation.chunk_selection import select_chunks
from study_engine.core.generation.error_classification import classify_errors
from study_engine.core.generation.normalization import normalize_items
from study_engine.core.generation.prompts import build_generation_prompt
from study_engine.core.generation.response_parser import parse_json_array
from study_engine.core.generation.retry_policy import RetryPolicy
from study_engine.core.models import (
    CandidateItem,
    Difficulty,
    GenerationTask,
    ItemType,
    TaskResult,
    TopicGroup,
)

logger = logging.getLogger(__name__)

SOURCE_CHUNK_LIMIT = 3


class OrchestrationResult(BaseModel):
    """Capped items in group order plus every task outcome."""

    items: list[CandidateItem]
    task_results: list[TaskResult]

    @property
    def failed_tasks(self) -> int:
        return sum(1 for r in self.task_results if r.failed)

    @property
    def total_generated(self) -> int:
        return len(self.items)


class GenerationOrchestrator:
    """Run generation tasks for a set of groups."""

    def __init__(
        self,
        text_client: TextGenerationClient,
        settings: GenerationSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            text_client: Text-generation collaborator
            settings: Buffers, per-call ceiling, concurrency and timeouts
            retry_policy: Retry policy (built from settings when None)
            rng: Random source for chunk sampling
        """
        self.text_client = text_client
        self.settings = settings or GenerationSettings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)
        self.rng = rng or random.Random()

    def buffered_target(self, target: int, chapter_mode: bool) -> int:
        """Over-generation target absorbing dedup losses; at least 1."""
        multiplier = (
            self.settings.chapter_buffer_multiplier if chapter_mode else self.settings.topic_buffer_multiplier
        )
        return max(1, math.ceil(round(target * multiplier, 6)))

    def build_tasks(self, groups: list[TopicGroup], chapter_mode: bool) -> list[GenerationTask]:
        """
        Split each group's buffered target into tasks of at most max_items_per_call.

        Args:
            groups: Groups with targets
            chapter_mode: Whether groups come from chapter grouping

        Returns:
            list[GenerationTask]: Tasks in group order, then task order
        """
        tasks: list[GenerationTask] = []
        for group_index, group in enumerate(groups):
            remaining = self.buffered_target(group.target_count, chapter_mode)
            task_index = 0
            while remaining > 0:
                count = min(self.settings.max_items_per_call, remaining)
                tasks.append(
                    GenerationTask(
                        group_index=group_index,
                        group=group,
                        requested_count=count,
                        task_index=task_index,
                    )
                )
                remaining -= count
                task_index += 1
        return tasks

    async def run(
        self,
        groups: list[TopicGroup],
        item_type: ItemType,
        difficulty: Difficulty = Difficulty.MEDIUM,
        chapter_mode: bool = False,
    ) -> OrchestrationResult:
        """
        Generate items for every group.

        Args:
            groups: Groups with targets
            item_type: Item type to generate
            difficulty: Difficulty profile
            chapter_mode: Whether groups come from chapter grouping

        Returns:
            OrchestrationResult: Items capped per group, in group then task order

        Raises:
            GenerationError: When no task produced any item
        """
        tasks = self.build_tasks(groups, chapter_mode)
        logger.info(f"{__name__}:run - Created {len(tasks)} generation tasks for {len(groups)} groups")

        semaphore = asyncio.Semaphore(self.settings.concurrency_limit)
        results = await asyncio.gather(
            *(self._run_task(task, semaphore, item_type, difficulty, len(groups), chapter_mode) for task in tasks)
        )
        items = self._collect(groups, list(results))
        result = OrchestrationResult(items=items, task_results=list(results))

        if result.failed_tasks:
            unique_errors = list(dict.fromkeys(r.error for r in results if r.error))
            logger.warning(
                f"{__name__}:run - {result.failed_tasks}/{len(tasks)} tasks failed: {'; '.join(unique_errors)}"
            )

        if not items:
            category, message = classify_errors(list(results))
            raise GenerationError(
                message,
                category=category,
                details={"tasks": len(tasks), "failed_tasks": result.failed_tasks},
            )

        logger.info(f"{__name__}:run - Generated {len(items)} items from {len(groups)} groups")
        return result

    async def _run_task(
        self,
        task: GenerationTask,
        semaphore: asyncio.Semaphore,
        item_type: ItemType,
        difficulty: Difficulty,
        total_groups: int,
        chapter_mode: bool,
    ) -> TaskResult:
        """Run one task; failures are returned, never raised."""
        label = task.group.label or f"Group {task.group_index + 1}"
        chunks = select_chunks(task.group, self.settings, self.rng)
        if not chunks:
            logger.warning(f"{__name__}:_run_task - [{label}] No valid content chunks, skipping")
            return TaskResult(
                group_index=task.group_index,
                task_index=task.task_index,
                error="No valid content chunks",
                error_type="ContentError",
            )

        prompt = build_generation_prompt(
            item_type=item_type,
            count=task.requested_count,
            difficulty=difficulty,
            contents=[c.content for c in chunks],
            has_math=any(c.has_math for c in chunks),
            group_index=task.group_index,
            total_groups=total_groups,
            chapter=task.group.chapter if chapter_mode else None,
            chapter_title=task.group.chapter_title if chapter_mode else None,
        )
        source_ids = [c.id for c in chunks[:SOURCE_CHUNK_LIMIT]]

        logger.info(
            f"{__name__}:_run_task - [{label}] Generating {task.requested_count} items "
            f"from {len(chunks)} chunks"
        )
        try:
            items = await self.retry_policy.call(
                self._attempt, semaphore, prompt, source_ids, task, item_type, difficulty
            )
        except Exception as e:
            message = e.message if isinstance(e, StudyEngineException) else str(e)
            logger.error(f"{__name__}:_run_task - [{label}] All attempts failed: {message}")
            return TaskResult(
                group_index=task.group_index,
                task_index=task.task_index,
                error=message or type(e).__name__,
                error_type=type(e).__name__,
            )

        logger.info(f"{__name__}:_run_task - [{label}] Generated {len(items)} valid items")
        return TaskResult(group_index=task.group_index, task_index=task.task_index, items=items)

    async def _attempt(
        self,
        semaphore: asyncio.Semaphore,
        prompt: str,
        source_ids: list[str],
        task: GenerationTask,
        item_type: ItemType,
        difficulty: Difficulty,
    ) -> list[CandidateItem]:
        """One provider call; the semaphore is held per attempt, never across backoff."""
        timeout = self.settings.call_timeout_seconds
        async with semaphore:
            try:
                response = await asyncio.wait_for(
                    self.text_client.generate(prompt, json_mode=True), timeout=timeout
                )
            except asyncio.TimeoutError as e:
                raise ProviderTimeoutError(f"Generation call timed out after {timeout}s") from e

        raw_items = parse_json_array(response)
        items = normalize_items(raw_items, item_type, difficulty, source_ids, task.group)
        if not items:
            raise ResponseParseError(
                "LLM returned no valid items",
                details={"raw_items": len(raw_items), "preview": response[:200]},
            )
        return items

    def _collect(self, groups: list[TopicGroup], results: list[TaskResult]) -> list[CandidateItem]:
        """Merge task items per group in task order, keeping at most target + slack."""
        by_group: dict[int, list[CandidateItem]] = {}
        for result in sorted(results, key=lambda r: (r.group_index, r.task_index)):
            by_group.setdefault(result.group_index, []).extend(result.items)

        items: list[CandidateItem] = []
        for group_index, group in enumerate(groups):
            cap = group.target_count + self.settings.group_slack
            items.extend(by_group.get(group_index, [])[:cap])
        return items
