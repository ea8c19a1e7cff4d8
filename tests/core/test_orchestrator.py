"""
Test suite for GenerationOrchestrator.

Tests task splitting, concurrent execution, retry behavior, per-group
capping and error classification using a fake text client.

System role: Verification of the concurrent generation core
"""

import asyncio
import json
import re

import pytest

from study_engine.configs.generation import GenerationSettings
from study_engine.core.exceptions import (
    ConfigurationError,
    ErrorCategory,
    GenerationError,
    RateLimitError,
)
from study_engine.core.generation import GenerationOrchestrator, RetryPolicy
from study_engine.core.models import Difficulty, ItemType, MultipleChoiceItem

COUNT_PATTERN = re.compile(r"Generate exactly (\d+)")


async def no_sleep(delay: float) -> None:
    return None


class FakeTextClient:
    """Returns as many unique multiple-choice items as the prompt asks for."""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls = 0
        self.prompts: list[str] = []
        self.active = 0
        self.max_active = 0
        self.delay = delay

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        self.calls += 1
        self.prompts.append(prompt)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            count = int(COUNT_PATTERN.search(prompt).group(1))
            start = self.calls * 100
            return json.dumps(
                [
                    {
                        "question": f"Question number {start + i}?",
                        "options": {"A": "one", "B": "two", "C": "three", "D": "four"},
                        "correct_answer": "B",
                        "explanation": "Two is right.",
                    }
                    for i in range(count)
                ]
            )
        finally:
            self.active -= 1


class ScriptedTextClient(FakeTextClient):
    """Raises or returns scripted responses before behaving like FakeTextClient."""

    def __init__(self, script: list) -> None:
        super().__init__()
        self.script = list(script)

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        if self.script:
            step = self.script.pop(0)
            self.calls += 1
            if isinstance(step, Exception):
                raise step
            return step
        return await super().generate(prompt, json_mode)


class SignallingTextClient(ScriptedTextClient):
    """Scripted client that flags when a second call has been made."""

    def __init__(self, script: list) -> None:
        super().__init__(script)
        self.second_call = asyncio.Event()

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        response = await super().generate(prompt, json_mode)
        if self.calls >= 2:
            self.second_call.set()
        return response


class FailingTextClient:
    """Always raises the given error."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        self.calls += 1
        raise self.error


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Retry policy without real sleeping."""
    return RetryPolicy(max_retries=2, base_delay=0.0, max_delay=0.0, sleep=no_sleep)


def build_orchestrator(client, rng, policy: RetryPolicy | None = None, **overrides) -> GenerationOrchestrator:
    settings = GenerationSettings(**overrides)
    return GenerationOrchestrator(client, settings=settings, retry_policy=policy, rng=rng)


class TestTaskPlanning:
    """Test suite for buffered targets and task splitting."""

    def test_topic_mode_splits_at_call_ceiling(self, make_group, rng) -> None:
        """Test a topic target of 30 buffers to 39 and splits 20 + 19."""
        # Arrange
        orchestrator = build_orchestrator(FakeTextClient(), rng)

        # Act
        tasks = orchestrator.build_tasks([make_group(6, 30)], chapter_mode=False)

        # Assert
        assert [t.requested_count for t in tasks] == [20, 19]
        assert [t.task_index for t in tasks] == [0, 1]

    def test_chapter_mode_uses_larger_buffer(self, make_group, rng) -> None:
        """Test a chapter target of 30 buffers to 45 and splits 20 + 20 + 5."""
        # Arrange
        orchestrator = build_orchestrator(FakeTextClient(), rng)

        # Act
        tasks = orchestrator.build_tasks([make_group(6, 30)], chapter_mode=True)

        # Assert
        assert [t.requested_count for t in tasks] == [20, 20, 5]

    def test_zero_target_still_requests_one(self, rng) -> None:
        """Test the buffered target is at least one."""
        orchestrator = build_orchestrator(FakeTextClient(), rng)
        assert orchestrator.buffered_target(0, chapter_mode=False) == 1

    def test_tasks_follow_group_order(self, make_group, rng) -> None:
        """Test tasks are emitted group by group."""
        # Arrange
        orchestrator = build_orchestrator(FakeTextClient(), rng)
        groups = [make_group(4, 20, label="A"), make_group(4, 5, label="B", start=10)]

        # Act
        tasks = orchestrator.build_tasks(groups, chapter_mode=False)

        # Assert
        assert [(t.group_index, t.requested_count) for t in tasks] == [(0, 20), (0, 6), (1, 7)]


class TestOrchestratorRun:
    """Test suite for GenerationOrchestrator.run."""

    async def test_items_capped_per_group_in_group_order(self, make_group, rng) -> None:
        """Test four groups of target 5 yield 7 items each, ordered by group."""
        # Arrange
        client = FakeTextClient()
        orchestrator = build_orchestrator(client, rng)
        groups = [make_group(6, 5, label=f"Topic {g + 1}", start=g * 10) for g in range(4)]

        # Act
        result = await orchestrator.run(groups, ItemType.MULTIPLE_CHOICE, Difficulty.MEDIUM)

        # Assert
        assert result.total_generated == 28
        assert result.failed_tasks == 0
        assert client.calls == 4
        assert [item.topic for item in result.items] == [f"Topic {g + 1}" for g in range(4) for _ in range(7)]
        assert all(isinstance(item, MultipleChoiceItem) for item in result.items)

    async def test_cap_trims_over_generation(self, make_group, rng) -> None:
        """Test a group keeps at most target + slack items."""
        # Arrange
        orchestrator = build_orchestrator(FakeTextClient(), rng, topic_buffer_multiplier=2.0)

        # Act
        result = await orchestrator.run([make_group(6, 10)], ItemType.MULTIPLE_CHOICE)

        # Assert
        assert len(result.task_results[0].items) == 20
        assert result.total_generated == 12

    async def test_source_chunk_ids_come_from_group(self, make_group, rng) -> None:
        """Test items reference at most three chunks of their own group."""
        # Arrange
        orchestrator = build_orchestrator(FakeTextClient(), rng)
        group = make_group(10, 4)
        group_ids = {c.id for c in group.chunks}

        # Act
        result = await orchestrator.run([group], ItemType.MULTIPLE_CHOICE)

        # Assert
        for item in result.items:
            assert 1 <= len(item.source_chunk_ids) <= 3
            assert set(item.source_chunk_ids) <= group_ids

    async def test_concurrency_limit_respected(self, make_group, rng) -> None:
        """Test no more than concurrency_limit calls are in flight."""
        # Arrange
        client = FakeTextClient(delay=0.01)
        orchestrator = build_orchestrator(client, rng, concurrency_limit=2)
        groups = [make_group(4, 3, label=f"T{g}", start=g * 10) for g in range(6)]

        # Act
        await orchestrator.run(groups, ItemType.MULTIPLE_CHOICE)

        # Assert
        assert client.calls == 6
        assert client.max_active <= 2

    async def test_chapter_mode_prompt_names_chapter(self, make_group, rng) -> None:
        """Test chapter-mode prompts carry the chapter title."""
        # Arrange
        client = FakeTextClient()
        orchestrator = build_orchestrator(client, rng)
        group = make_group(4, 3, label="Limits", chapter=2, chapter_title="Limits")

        # Act
        await orchestrator.run([group], ItemType.MULTIPLE_CHOICE, chapter_mode=True)

        # Assert
        assert 'Chapter 2: "Limits"' in client.prompts[0]

    async def test_garbage_response_is_retried(self, make_group, rng, fast_policy: RetryPolicy) -> None:
        """Test an unparseable response is retried and then recovers."""
        # Arrange
        client = ScriptedTextClient(["I am not JSON"])
        orchestrator = build_orchestrator(client, rng, policy=fast_policy)

        # Act
        result = await orchestrator.run([make_group(4, 3)], ItemType.MULTIPLE_CHOICE)

        # Assert
        assert client.calls == 2
        assert result.total_generated == 4
        assert result.failed_tasks == 0

    async def test_malformed_reply_mentioning_credentials_is_retried(
        self, make_group, rng, fast_policy: RetryPolicy
    ) -> None:
        """Test a bad reply whose text talks about API keys is still retried."""
        # Arrange
        reply = '[{"question": "Where should an API key be stored?", "options": {"A": "env"}}]'
        client = ScriptedTextClient([reply])
        orchestrator = build_orchestrator(client, rng, policy=fast_policy)

        # Act
        result = await orchestrator.run([make_group(4, 3)], ItemType.MULTIPLE_CHOICE)

        # Assert
        assert client.calls == 2
        assert result.total_generated == 4
        assert result.failed_tasks == 0

    async def test_backoff_releases_concurrency_slot(self, make_group, rng) -> None:
        """Test a task waiting to retry does not block another task's call."""
        # Arrange
        client = SignallingTextClient(["I am not JSON"])

        async def wait_for_other_task(delay: float) -> None:
            await asyncio.wait_for(client.second_call.wait(), timeout=1.0)

        policy = RetryPolicy(max_retries=1, base_delay=0.0, max_delay=0.0, sleep=wait_for_other_task)
        orchestrator = build_orchestrator(client, rng, policy=policy, concurrency_limit=1)
        groups = [make_group(4, 3, label="A"), make_group(4, 3, label="B", start=10)]

        # Act
        result = await orchestrator.run(groups, ItemType.MULTIPLE_CHOICE)

        # Assert
        assert result.failed_tasks == 0
        assert client.calls == 3
        assert result.total_generated == 8

    async def test_partial_failure_keeps_other_groups(self, make_group, rng) -> None:
        """Test one failed task does not fail the run."""
        # Arrange
        client = ScriptedTextClient([RuntimeError("boom")])
        orchestrator = build_orchestrator(client, rng, policy=RetryPolicy(max_retries=0), concurrency_limit=1)
        groups = [make_group(4, 3, label=f"T{g}", start=g * 10) for g in range(3)]

        # Act
        result = await orchestrator.run(groups, ItemType.MULTIPLE_CHOICE)

        # Assert
        assert result.failed_tasks == 1
        assert result.total_generated == 8
        failed = [r for r in result.task_results if r.failed]
        assert failed[0].error == "boom"
        assert failed[0].error_type == "RuntimeError"


class TestOrchestratorErrors:
    """Test suite for error classification when nothing is generated."""

    async def test_rate_limited_everywhere(self, make_group, rng, fast_policy: RetryPolicy) -> None:
        """Test persistent rate limits retry fully and classify as rate limit."""
        # Arrange
        client = FailingTextClient(RateLimitError("429 quota exceeded"))
        orchestrator = build_orchestrator(client, rng, policy=fast_policy)
        groups = [make_group(4, 3, label="A"), make_group(4, 3, label="B", start=10)]

        # Act & Assert
        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.run(groups, ItemType.MULTIPLE_CHOICE)
        assert exc_info.value.category == ErrorCategory.RATE_LIMIT
        assert "rate limit" in exc_info.value.message
        assert client.calls == 6
        assert exc_info.value.details["failed_tasks"] == 2

    async def test_missing_credentials_not_retried(self, make_group, rng, fast_policy: RetryPolicy) -> None:
        """Test configuration errors stop after one attempt and classify as auth."""
        # Arrange
        client = FailingTextClient(ConfigurationError("Gemini API key not configured"))
        orchestrator = build_orchestrator(client, rng, policy=fast_policy)

        # Act & Assert
        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.run([make_group(4, 3)], ItemType.MULTIPLE_CHOICE)
        assert exc_info.value.category == ErrorCategory.AUTH
        assert client.calls == 1

    async def test_call_timeout_is_generic_failure(self, make_group, rng) -> None:
        """Test a hung call times out and reports the timeout."""
        # Arrange
        client = FakeTextClient(delay=1.0)
        orchestrator = build_orchestrator(
            client, rng, policy=RetryPolicy(max_retries=0), call_timeout_seconds=0.01
        )

        # Act & Assert
        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.run([make_group(4, 3)], ItemType.MULTIPLE_CHOICE)
        assert exc_info.value.category == ErrorCategory.GENERIC
        assert exc_info.value.message.startswith("Generation failed: Generation call timed out")

    async def test_items_all_invalid_is_parse_failure(self, make_group, rng) -> None:
        """Test responses with no usable items classify as parse failures."""
        # Arrange
        client = ScriptedTextClient(['[{"question": "Missing options?"}]'])
        orchestrator = build_orchestrator(client, rng, policy=RetryPolicy(max_retries=0))

        # Act & Assert
        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.run([make_group(4, 3)], ItemType.MULTIPLE_CHOICE)
        assert exc_info.value.category == ErrorCategory.PARSE
