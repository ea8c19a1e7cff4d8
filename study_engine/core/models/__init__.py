"""Domain models for chunks, groups, generated items and sets."""

from study_engine.core.models.chunk import (
    ChapterGroup,
    Chunk,
    ChunkMetadata,
    ContentType,
    TopicGroup,
    make_chunk_id,
)
from study_engine.core.models.generation import (
    GeneratedSet,
    GenerationStats,
    GenerationTask,
    SetKind,
    TaskResult,
)
from study_engine.core.models.items import (
    CandidateItem,
    Difficulty,
    FlashcardItem,
    ItemType,
    MultipleChoiceItem,
    ShortAnswerItem,
    TrueFalseItem,
    candidate_item_adapter,
)

__all__ = [
    "CandidateItem",
    "ChapterGroup",
    "Chunk",
    "ChunkMetadata",
    "ContentType",
    "Difficulty",
    "FlashcardItem",
    "GeneratedSet",
    "GenerationStats",
    "GenerationTask",
    "ItemType",
    "MultipleChoiceItem",
    "SetKind",
    "ShortAnswerItem",
    "TaskResult",
    "TopicGroup",
    "TrueFalseItem",
    "candidate_item_adapter",
    "make_chunk_id",
]
