"""
Generation task and set models.

Dependencies: pydantic
System role: Work units and results of the generation orchestrator
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from study_engine.core.models.chunk import TopicGroup
from study_engine.core.models.items import CandidateItem, Difficulty, ItemType


class GenerationTask(BaseModel):
    """One bounded generation call for a group."""

    group_index: int = Field(ge=0)
    group: TopicGroup
    requested_count: int = Field(ge=1)
    task_index: int = Field(ge=0, description="Position within the group's tasks")


class TaskResult(BaseModel):
    """Outcome of a generation task; failures carry an error instead of items."""

    group_index: int
    task_index: int
    items: list[CandidateItem] = Field(default_factory=list)
    error: str | None = None
    error_type: str | None = Field(default=None, description="Exception class name")

    @property
    def failed(self) -> bool:
        return self.error is not None


class SetKind(str, Enum):
    """Kind of persisted study set."""

    QUIZ = "quiz"
    FLASHCARDS = "flashcards"


class GenerationStats(BaseModel):
    """Statistics describing a generation run."""

    model_config = ConfigDict(frozen=True)

    groups_used: int = Field(ge=0)
    generation_time_ms: float = Field(ge=0)
    total_generated: int = Field(ge=0)
    after_dedup: int = Field(ge=0)
    chapter_mode: bool = False
    failed_tasks: int = Field(default=0, ge=0)


class GeneratedSet(BaseModel):
    """Final quiz or flashcard set. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    kind: SetKind
    item_type: ItemType
    difficulty: Difficulty = Difficulty.MEDIUM
    items: list[CandidateItem]
    stats: GenerationStats
    description: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
