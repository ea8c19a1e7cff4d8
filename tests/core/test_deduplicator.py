"""
Test suite for Deduplicator.

Tests the lexical pre-filter, the embedding pass and its thresholds,
and order preservation.

System role: Verification of near-duplicate removal
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from study_engine.configs.dedup import DedupSettings
from study_engine.core.dedup import Deduplicator, text_similarity
from study_engine.core.exceptions import EmbeddingError
from study_engine.core.models import FlashcardItem


def card(front: str) -> FlashcardItem:
    return FlashcardItem(front=front, back="answer", source_chunk_ids=["c1"])


FRONTS = [
    "Define the derivative of a function",
    "State the mean value theorem",
    "Explain continuity at a point",
    "Describe an antiderivative family",
    "Compute integrals by substitution",
    "Recall the chain rule formula",
]

VECTORS = {
    FRONTS[0]: [1.0, 0.0, 0.0, 0.0],
    FRONTS[1]: [0.0, 1.0, 0.0, 0.0],
    FRONTS[2]: [0.0, 0.0, 1.0, 0.0],
    FRONTS[3]: [0.99, 0.1, 0.0, 0.0],
    FRONTS[4]: [0.0, 0.0, 0.0, 1.0],
    FRONTS[5]: [0.5, 0.5, 0.5, 0.5],
}


@pytest.fixture
def embedder() -> MagicMock:
    """Embedder returning fixed vectors per text."""
    mock = MagicMock()
    mock.embed_batch = AsyncMock(side_effect=lambda texts: [VECTORS[t] for t in texts])
    return mock


class TestTextSimilarity:
    """Test suite for text_similarity."""

    def test_identical_and_disjoint(self) -> None:
        """Test Jaccard bounds."""
        assert text_similarity("alpha beta gamma", "gamma beta alpha") == 1.0
        assert text_similarity("alpha beta", "delta omega") == 0.0

    def test_short_words_ignored(self) -> None:
        """Test words of two characters or fewer do not count."""
        assert text_similarity("is a of", "to be or") == 0.0


class TestDeduplicator:
    """Test suite for Deduplicator.deduplicate."""

    async def test_single_item_unchanged(self, embedder) -> None:
        """Test zero or one item is returned as is."""
        # Arrange
        dedup = Deduplicator(embedder)

        # Act & Assert
        assert await dedup.deduplicate([]) == []
        assert await dedup.deduplicate([card("Only one")]) == [card("Only one")]
        embedder.embed_batch.assert_not_awaited()

    async def test_prefilter_removes_lexical_duplicates(self, embedder) -> None:
        """Test near-identical wording is removed without embedding."""
        # Arrange
        dedup = Deduplicator(embedder)
        items = [
            card("Define the derivative of a polynomial function clearly"),
            card("Define the derivative of a polynomial function"),
            card("State the mean value theorem"),
        ]

        # Act
        result = await dedup.deduplicate(items)

        # Assert
        assert [c.front for c in result] == [items[0].front, items[2].front]
        embedder.embed_batch.assert_not_awaited()

    async def test_embedding_pass_removes_semantic_duplicates(self, embedder) -> None:
        """Test a vector above the cosine threshold of an earlier item is dropped."""
        # Arrange
        dedup = Deduplicator(embedder)
        items = [card(front) for front in FRONTS]

        # Act
        result = await dedup.deduplicate(items)

        # Assert
        assert [c.front for c in result] == [FRONTS[0], FRONTS[1], FRONTS[2], FRONTS[4], FRONTS[5]]
        embedder.embed_batch.assert_awaited_once_with(FRONTS)

    async def test_output_is_stable(self, embedder) -> None:
        """Test deduplicating the output again removes nothing."""
        # Arrange
        dedup = Deduplicator(embedder, DedupSettings(min_candidates_for_embedding=2))
        first = await dedup.deduplicate([card(front) for front in FRONTS])

        # Act
        second = await dedup.deduplicate(first)

        # Assert
        assert second == first

    async def test_threshold_is_configurable(self, embedder) -> None:
        """Test a stricter threshold keeps moderately similar items."""
        # Arrange
        dedup = Deduplicator(embedder, DedupSettings(similarity_threshold=0.999))

        # Act
        result = await dedup.deduplicate([card(front) for front in FRONTS])

        # Assert
        assert len(result) == 6

    async def test_zero_vectors_are_kept(self) -> None:
        """Test items with zero-norm vectors never count as duplicates."""
        # Arrange
        embedder = MagicMock()
        embedder.embed_batch = AsyncMock(side_effect=lambda texts: [[0.0, 0.0] for _ in texts])
        dedup = Deduplicator(embedder)

        # Act
        result = await dedup.deduplicate([card(front) for front in FRONTS])

        # Assert
        assert len(result) == 6

    async def test_prefilter_can_be_disabled(self) -> None:
        """Test every item reaches the embedding pass without the pre-filter."""
        # Arrange
        embedder = MagicMock()
        embedder.embed_batch = AsyncMock(side_effect=lambda texts: [[1.0, float(i)] for i in range(len(texts))])
        settings = DedupSettings(enable_text_prefilter=False, min_candidates_for_embedding=2)
        dedup = Deduplicator(embedder, settings)

        # Act
        await dedup.deduplicate([card("Same words here"), card("Same words here")])

        # Assert
        embedder.embed_batch.assert_awaited_once_with(["Same words here", "Same words here"])

    async def test_embedding_count_mismatch(self) -> None:
        """Test a short embedding batch raises EmbeddingError."""
        # Arrange
        embedder = MagicMock()
        embedder.embed_batch = AsyncMock(return_value=[[1.0, 0.0]])
        dedup = Deduplicator(embedder)

        # Act & Assert
        with pytest.raises(EmbeddingError):
            await dedup.deduplicate([card(front) for front in FRONTS])
