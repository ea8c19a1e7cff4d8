"""
Test suite for domain models.

System role: Verification of chunk identity, embedding parsing and item unions
"""

import pytest
from pydantic import ValidationError

from study_engine.core.models import (
    Chunk,
    FlashcardItem,
    GeneratedSet,
    GenerationStats,
    ItemType,
    MultipleChoiceItem,
    SetKind,
    TrueFalseItem,
    candidate_item_adapter,
    make_chunk_id,
)


class TestChunk:
    """Test suite for Chunk."""

    def test_id_is_deterministic(self) -> None:
        """Test equal inputs give equal ids and any change gives a new one."""
        first = Chunk.create("m1", 0, "text")
        assert first.id == Chunk.create("m1", 0, "text").id == make_chunk_id("m1", 0, "text")
        assert first.id != Chunk.create("m1", 1, "text").id
        assert first.id != Chunk.create("m2", 0, "text").id
        assert len(first.id) == 16

    @pytest.mark.parametrize(
        "raw, expected",
        [("[0.5, 1]", [0.5, 1.0]), ("not json", None), (["a", "b"], None), (None, None), ([True, 1.0], None)],
    )
    def test_embedding_parsing(self, raw, expected) -> None:
        """Test string vectors parse and unusable vectors are dropped."""
        assert Chunk.create("m1", 0, "text", embedding=raw).embedding == expected


class TestItems:
    """Test suite for generated item models."""

    def test_union_dispatches_on_item_type(self) -> None:
        """Test the discriminator picks the right variant."""
        item = candidate_item_adapter.validate_python(
            {"item_type": "true_false", "question": "Water boils at 100C.", "correct_answer": "true",
             "source_chunk_ids": ["c1"]}
        )
        assert isinstance(item, TrueFalseItem)
        assert item.primary_text == "Water boils at 100C."

    def test_options_must_be_a_to_d(self) -> None:
        """Test multiple choice options need exactly four letter keys."""
        with pytest.raises(ValidationError):
            MultipleChoiceItem(
                question="Q?", options={"A": "1", "B": "2", "C": "3"}, correct_answer="A", source_chunk_ids=["c1"]
            )

    def test_items_are_immutable(self) -> None:
        """Test items cannot be modified after creation."""
        card = FlashcardItem(front="Atom", back="Unit", source_chunk_ids=["c1"])
        with pytest.raises(ValidationError):
            card.front = "Molecule"

    def test_generated_set_is_immutable(self) -> None:
        """Test sets are frozen once built."""
        generated = GeneratedSet(
            name="Set",
            kind=SetKind.FLASHCARDS,
            item_type=ItemType.FLASHCARD,
            items=[],
            stats=GenerationStats(groups_used=0, generation_time_ms=0, total_generated=0, after_dedup=0),
        )
        with pytest.raises(ValidationError):
            generated.name = "Other"
