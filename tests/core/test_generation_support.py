"""
Test suite for generation support helpers.

Tests chunk selection, prompt construction and aggregated error
classification.

System role: Verification of the pieces the orchestrator composes
"""

import random

from study_engine.configs.generation import GenerationSettings
from study_engine.core.exceptions import ErrorCategory
from study_engine.core.generation import build_generation_prompt, classify_errors, filter_content_chunks, select_chunks
from study_engine.core.generation.chunk_selection import is_content_chunk, rank_by_centroid
from study_engine.core.models import Difficulty, ItemType, TaskResult, TopicGroup


def failure(error: str, error_type: str = "ProviderError") -> TaskResult:
    return TaskResult(group_index=0, task_index=0, error=error, error_type=error_type)


class TestContentFilter:
    """Test suite for content chunk filtering."""

    def test_regular_prose_is_content(self, make_chunk) -> None:
        """Test ordinary passages are kept."""
        assert is_content_chunk(make_chunk(0))

    def test_index_and_toc_rejected(self, make_chunk) -> None:
        """Test indexes, tables of contents and page lists are rejected."""
        index = make_chunk(0, content="Index\n" + ", ".join(f"term {i}" for i in range(15)))
        toc = make_chunk(1, content="Table of Contents\nIntroduction to limits and derivatives ........ 1")
        pages = make_chunk(2, content=" ".join(str(i) for i in range(25)))

        assert not is_content_chunk(index)
        assert not is_content_chunk(toc)
        assert not is_content_chunk(pages)

    def test_short_fragment_rejected(self, make_chunk) -> None:
        """Test chunks under the minimum length are rejected."""
        assert not is_content_chunk(make_chunk(0, content="Too short."))

    def test_falls_back_to_all_non_empty(self, make_chunk) -> None:
        """Test a group of only fragments still yields its chunks."""
        # Arrange
        chunks = [make_chunk(0, content="Tiny one."), make_chunk(1, content="Tiny two.")]

        # Act
        result = filter_content_chunks(chunks)

        # Assert
        assert result == chunks


class TestChunkSelection:
    """Test suite for select_chunks."""

    def test_rank_by_centroid(self, make_chunk) -> None:
        """Test chunks are ordered by similarity, missing embeddings last."""
        # Arrange
        far = make_chunk(0, embedding=[0.0, 1.0])
        near = make_chunk(1, embedding=[1.0, 0.1])
        missing = make_chunk(2)

        # Act
        ranked = rank_by_centroid([missing, far, near], [1.0, 0.0])

        # Assert
        assert ranked == [near, far, missing]

    def test_representative_then_variety(self, make_chunk) -> None:
        """Test three picks come from the top pool and two from the rest."""
        # Arrange
        chunks = [make_chunk(i, embedding=[1.0, i * 0.3]) for i in range(12)]
        group = TopicGroup(chunks=list(reversed(chunks)), centroid=[1.0, 0.0], target_count=5)
        top_pool_ids = {c.id for c in chunks[:8]}

        # Act
        selected = select_chunks(group, GenerationSettings(), random.Random(3))

        # Assert
        assert len(selected) == 5
        assert len({c.id for c in selected}) == 5
        assert all(c.id in top_pool_ids for c in selected[:3])

    def test_small_group_uses_everything(self, make_chunk) -> None:
        """Test a group smaller than the sample uses every chunk once."""
        # Arrange
        group = TopicGroup(chunks=[make_chunk(0), make_chunk(1)], target_count=2)

        # Act
        selected = select_chunks(group, GenerationSettings(), random.Random(1))

        # Assert
        assert sorted(c.index for c in selected) == [0, 1]

    def test_sampling_varies_between_calls(self, make_chunk) -> None:
        """Test repeated selection for a large group is not always identical."""
        # Arrange
        group = TopicGroup(chunks=[make_chunk(i) for i in range(20)], target_count=10)
        rng = random.Random(11)

        # Act
        picks = {tuple(c.id for c in select_chunks(group, GenerationSettings(), rng)) for _ in range(10)}

        # Assert
        assert len(picks) > 1


class TestPrompt:
    """Test suite for build_generation_prompt."""

    def test_contains_count_content_and_rules(self) -> None:
        """Test the prompt carries the count, the source text and the rules."""
        # Act
        prompt = build_generation_prompt(
            ItemType.MULTIPLE_CHOICE, 7, Difficulty.HARD, ["First passage.", "Second passage."]
        )

        # Assert
        assert "Generate exactly 7 multiple-choice questions." in prompt
        assert "First passage.\n\n---\n\nSecond passage." in prompt
        assert "NEVER reference the text" in prompt
        assert "All questions should be hard difficulty" in prompt
        assert "LaTeX" not in prompt

    def test_math_and_mixed_difficulty(self) -> None:
        """Test math guidance and the mixed difficulty profile."""
        # Act
        prompt = build_generation_prompt(ItemType.FLASHCARD, 3, Difficulty.MIXED, ["$x^2$"], has_math=True)

        # Assert
        assert "LaTeX" in prompt
        assert "Mix of easy (30%)" in prompt
        assert "Generate exactly 3 flashcards." in prompt

    def test_context_variants(self) -> None:
        """Test chapter and topic-area context lines."""
        chapter_prompt = build_generation_prompt(
            ItemType.TRUE_FALSE, 2, Difficulty.EASY, ["x"], chapter=3, chapter_title="Series"
        )
        topic_prompt = build_generation_prompt(
            ItemType.SHORT_ANSWER, 2, Difficulty.EASY, ["x"], group_index=1, total_groups=4
        )

        assert 'Chapter 3: "Series"' in chapter_prompt
        assert "topic area 2 of 4" in topic_prompt


class TestClassifyErrors:
    """Test suite for classify_errors."""

    def test_no_errors(self) -> None:
        """Test zero items without errors asks for different content."""
        category, message = classify_errors([TaskResult(group_index=0, task_index=0)])
        assert category == ErrorCategory.GENERIC
        assert message.startswith("No valid items were produced")

    def test_auth_beats_rate_limit(self) -> None:
        """Test credential problems take precedence."""
        category, _ = classify_errors(
            [failure("429 Too Many Requests", "RateLimitError"), failure("Gemini API key not configured")]
        )
        assert category == ErrorCategory.AUTH

    def test_rate_limit_from_message(self) -> None:
        """Test quota wording classifies as rate limit."""
        category, message = classify_errors([failure("Resource quota exhausted")])
        assert category == ErrorCategory.RATE_LIMIT
        assert "rate limit" in message

    def test_rate_limit_needs_word_boundaries(self) -> None:
        """Test words merely containing 'rate' do not count."""
        category, _ = classify_errors([failure("Failed to generate items")])
        assert category == ErrorCategory.GENERIC

    def test_parse_category(self) -> None:
        """Test JSON failures classify as parse errors."""
        category, _ = classify_errors([failure("JSON parse failed: Expecting value")])
        assert category == ErrorCategory.PARSE

    def test_generic_uses_first_unique_error(self) -> None:
        """Test generic failures report the first distinct message."""
        category, message = classify_errors([failure("boom"), failure("boom"), failure("crash")])
        assert category == ErrorCategory.GENERIC
        assert message == "Generation failed: boom"
