"""
Generated item models.

Candidate items form a tagged union keyed by ``item_type``; each variant
carries only the fields its type needs.

Dependencies: pydantic
System role: Output types of the generation orchestrator and deduplicator
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

OPTION_KEYS = ("A", "B", "C", "D")


class ItemType(str, Enum):
    """Kinds of generated study items."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    FLASHCARD = "flashcard"


class Difficulty(str, Enum):
    """Requested or assigned item difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


class ItemBase(BaseModel):
    """Fields shared by every generated item."""

    model_config = ConfigDict(frozen=True)

    explanation: str | None = None
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    topic: str | None = None
    chapter: int | None = None
    chapter_title: str | None = None
    source_chunk_ids: list[str] = Field(min_length=1)


class MultipleChoiceItem(ItemBase):
    """Four-option question with a single correct letter."""

    item_type: Literal["multiple_choice"] = "multiple_choice"
    question: str = Field(min_length=1)
    options: dict[str, str]
    correct_answer: Literal["A", "B", "C", "D"]

    @field_validator("options")
    @classmethod
    def check_option_keys(cls, value: dict[str, str]) -> dict[str, str]:
        """Options must be keyed exactly A through D."""
        if tuple(sorted(value)) != OPTION_KEYS:
            raise ValueError("options must have keys A, B, C and D")
        return value

    @property
    def primary_text(self) -> str:
        return self.question


class TrueFalseItem(ItemBase):
    """Statement judged true or false."""

    item_type: Literal["true_false"] = "true_false"
    question: str = Field(min_length=1)
    correct_answer: Literal["true", "false"]

    @property
    def primary_text(self) -> str:
        return self.question


class ShortAnswerItem(ItemBase):
    """Open question with a model answer and grading points."""

    item_type: Literal["short_answer"] = "short_answer"
    question: str = Field(min_length=1)
    model_answer: str | None = None
    key_points: list[str] = Field(default_factory=list)

    @property
    def primary_text(self) -> str:
        return self.question


class FlashcardItem(ItemBase):
    """Front/back study card."""

    item_type: Literal["flashcard"] = "flashcard"
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)

    @property
    def primary_text(self) -> str:
        return self.front


CandidateItem = Annotated[
    Union[MultipleChoiceItem, TrueFalseItem, ShortAnswerItem, FlashcardItem],
    Field(discriminator="item_type"),
]

candidate_item_adapter: TypeAdapter[CandidateItem] = TypeAdapter(CandidateItem)
