"""
Test suite for item normalization.

Tests repair of options, answers and difficulty, annotation from the
group and rejection of unusable items.

System role: Verification of the raw-to-typed item boundary
"""

import pytest

from study_engine.core.generation import normalize_item, normalize_items
from study_engine.core.generation.normalization import (
    normalize_boolean_answer,
    normalize_choice_answer,
    normalize_difficulty,
    normalize_options,
)
from study_engine.core.models import (
    Difficulty,
    FlashcardItem,
    ItemType,
    MultipleChoiceItem,
    ShortAnswerItem,
    TopicGroup,
    TrueFalseItem,
)

OPTIONS = {"A": "Paris", "B": "Rome", "C": "Madrid", "D": "Berlin"}


@pytest.fixture
def group() -> TopicGroup:
    """Provide a chapter group used for annotation."""
    return TopicGroup(chunks=[], target_count=3, label="Geography - Topic 1", chapter=4, chapter_title="Geography")


class TestNormalizeOptions:
    """Test suite for normalize_options."""

    @pytest.mark.parametrize(
        "raw",
        [
            OPTIONS,
            {"a": "Paris", "b": "Rome", "c": "Madrid", "d": "Berlin"},
            {"1": "Paris", "2": "Rome", "3": "Madrid", "4": "Berlin"},
            ["Paris", "Rome", "Madrid", "Berlin"],
        ],
    )
    def test_accepted_shapes(self, raw) -> None:
        """Test letter, lowercase, numeric and list options map to A-D."""
        assert normalize_options(raw) == OPTIONS

    @pytest.mark.parametrize(
        "raw",
        [None, "A) Paris", ["Paris", "Rome", "Madrid"], {"A": "Paris", "B": "", "C": "Madrid", "D": "Berlin"}],
    )
    def test_rejected_shapes(self, raw) -> None:
        """Test missing, short or blank options are rejected."""
        assert normalize_options(raw) is None


class TestNormalizeAnswers:
    """Test suite for answer normalization helpers."""

    @pytest.mark.parametrize("raw, expected", [("b", "B"), ("C)", "C"), ("D.", "D"), ("madrid", "C"), ("E", None)])
    def test_choice_answer(self, raw: str, expected) -> None:
        """Test letters, decorated letters and option text map to a letter."""
        assert normalize_choice_answer(raw, OPTIONS) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [(True, "true"), (False, "false"), ("Yes", "true"), ("f", "false"), ("0", "false"), ("maybe", None)],
    )
    def test_boolean_answer(self, raw, expected) -> None:
        """Test booleans and their common spellings map to true/false."""
        assert normalize_boolean_answer(raw) == expected

    def test_difficulty_fallbacks(self) -> None:
        """Test invalid difficulty falls back to the requested one, mixed to medium."""
        assert normalize_difficulty("HARD", Difficulty.EASY) == "hard"
        assert normalize_difficulty("extreme", Difficulty.EASY) == "easy"
        assert normalize_difficulty(None, Difficulty.MIXED) == "medium"


class TestNormalizeItem:
    """Test suite for normalize_item."""

    def test_multiple_choice_item(self, group: TopicGroup) -> None:
        """Test a multiple choice item is repaired and annotated."""
        # Arrange
        raw = {
            "question": "What is the capital of France?",
            "options": ["Paris", "Rome", "Madrid", "Berlin"],
            "correctAnswer": "a",
            "explanation": "Paris is the capital.",
        }

        # Act
        item = normalize_item(raw, ItemType.MULTIPLE_CHOICE, Difficulty.MEDIUM, ["c1", "c2"], group)

        # Assert
        assert isinstance(item, MultipleChoiceItem)
        assert item.correct_answer == "A"
        assert item.options == OPTIONS
        assert item.topic == "Geography - Topic 1"
        assert item.chapter == 4
        assert item.chapter_title == "Geography"
        assert item.source_chunk_ids == ["c1", "c2"]
        assert item.difficulty == "medium"

    def test_own_topic_wins_over_group_label(self, group: TopicGroup) -> None:
        """Test a topic supplied by the model is kept."""
        # Arrange
        raw = {"question": "Rome is in Italy.", "correct_answer": "true", "topic": "Cities"}

        # Act
        item = normalize_item(raw, ItemType.TRUE_FALSE, Difficulty.HARD, ["c1"], group)

        # Assert
        assert isinstance(item, TrueFalseItem)
        assert item.topic == "Cities"
        assert item.difficulty == "hard"

    def test_short_answer_item(self) -> None:
        """Test short answers keep model answer and key points."""
        # Arrange
        raw = {"question": "Why?", "modelAnswer": "Because.", "key_points": ["cause", "", "effect"]}

        # Act
        item = normalize_item(raw, ItemType.SHORT_ANSWER, Difficulty.MEDIUM, ["c1"])

        # Assert
        assert isinstance(item, ShortAnswerItem)
        assert item.model_answer == "Because."
        assert item.key_points == ["cause", "effect"]

    def test_flashcard_item(self) -> None:
        """Test flashcards accept front/back."""
        # Act
        item = normalize_item({"front": "Atom", "back": "Smallest unit"}, ItemType.FLASHCARD, Difficulty.EASY, ["c1"])

        # Assert
        assert isinstance(item, FlashcardItem)
        assert item.primary_text == "Atom"

    @pytest.mark.parametrize(
        "raw, item_type",
        [
            ("not a dict", ItemType.MULTIPLE_CHOICE),
            ({"options": OPTIONS, "correct_answer": "A"}, ItemType.MULTIPLE_CHOICE),
            ({"question": "Q?", "options": OPTIONS, "correct_answer": "Z"}, ItemType.MULTIPLE_CHOICE),
            ({"question": "Q?", "correct_answer": "sometimes"}, ItemType.TRUE_FALSE),
            ({"front": "Term"}, ItemType.FLASHCARD),
        ],
    )
    def test_unusable_items_are_dropped(self, raw, item_type: ItemType) -> None:
        """Test items that cannot be repaired return None."""
        assert normalize_item(raw, item_type, Difficulty.MEDIUM, ["c1"]) is None

    def test_missing_source_ids_rejected(self) -> None:
        """Test every item must reference at least one chunk."""
        assert normalize_item({"front": "A", "back": "B"}, ItemType.FLASHCARD, Difficulty.MEDIUM, []) is None

    def test_normalize_items_keeps_valid_in_order(self) -> None:
        """Test only valid items survive, order preserved."""
        # Arrange
        raw_items = [{"front": "1", "back": "x"}, {"front": "2"}, {"front": "3", "back": "z"}]

        # Act
        items = normalize_items(raw_items, ItemType.FLASHCARD, Difficulty.MEDIUM, ["c1"])

        # Assert
        assert [i.front for i in items] == ["1", "3"]
