"""
Study set service.

Loads material chunks, applies an optional per-material chapter filter,
plans generation groups, generates a quiz or flashcard set and stores it.
Also derives flashcards from an existing quiz.

Dependencies: study_engine.core.grouping, study_engine.core.generation, study_engine.boundary
System role: Entry point for quiz and flashcard generation
"""

import logging
from typing import Iterable, Mapping, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.boundary.db.store import SqlAlchemyStudyStore, StudyStore
from study_engine.core.exceptions import ContentError
from study_engine.core.generation import SetGenerator
from study_engine.core.generation.set_generator import default_set_name
from study_engine.core.grouping import GroupPlanner
from study_engine.core.models import (
    Chunk,
    Difficulty,
    FlashcardItem,
    GeneratedSet,
    GenerationStats,
    ItemType,
    MultipleChoiceItem,
    SetKind,
)

logger = logging.getLogger(__name__)

ChapterFilter = Mapping[str, Iterable[int]]


def apply_chapter_filter(chunks: Sequence[Chunk], chapter_filter: ChapterFilter | None) -> list[Chunk]:
    """
    Keep only selected chapters of the materials named in the filter.

    Materials absent from the filter keep all of their chunks.

    Args:
        chunks: Chunks of the selected materials
        chapter_filter: Allowed chapter numbers per material id

    Returns:
        list[Chunk]: Remaining chunks in input order
    """
    if not chapter_filter:
        return list(chunks)
    allowed = {material_id: set(chapters) for material_id, chapters in chapter_filter.items()}
    return [
        c for c in chunks
        if c.material_id not in allowed or c.metadata.chapter in allowed[c.material_id]
    ]


def flashcard_from_question(question: MultipleChoiceItem) -> FlashcardItem:
    """Front is the question; back is the correct option, the explanation or the letter."""
    back = question.options.get(question.correct_answer, "").strip()
    if not back and question.explanation:
        back = question.explanation
    return FlashcardItem(
        front=question.question,
        back=back or f"Answer: {question.correct_answer}",
        difficulty=question.difficulty,
        topic=question.topic,
        chapter=question.chapter,
        chapter_title=question.chapter_title,
        source_chunk_ids=question.source_chunk_ids,
    )


class StudySetService:
    """
    Study set orchestrator.

    Coordinates chunk loading, group planning, generation and storage.
    """

    def __init__(
        self,
        db: AsyncSession,
        planner: GroupPlanner,
        generator: SetGenerator,
        store: StudyStore | None = None,
    ) -> None:
        """
        Initialize study set service.

        Args:
            db: AsyncSession for database operations
            planner: Group planner (chapters or topic clusters)
            generator: Set generator (orchestration and dedup)
            store: Study store (SQLAlchemy store over db when None)
        """
        self.db = db
        self.planner = planner
        self.generator = generator
        self.store = store or SqlAlchemyStudyStore(db)

    async def generate_quiz(
        self,
        material_ids: Sequence[str],
        question_count: int,
        item_type: ItemType = ItemType.MULTIPLE_CHOICE,
        difficulty: Difficulty = Difficulty.MEDIUM,
        chapter_filter: ChapterFilter | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> GeneratedSet:
        """
        Generate and store a quiz.

        Args:
            material_ids: Materials to generate from
            question_count: Maximum number of questions
            item_type: Question type (not flashcard)
            difficulty: Difficulty profile
            chapter_filter: Allowed chapters per material
            name: Quiz name (dated default when None)
            description: Optional description

        Returns:
            GeneratedSet: Stored quiz

        Raises:
            ValueError: When item_type is flashcard
            ContentError: When the selection has no content
            GenerationError: When nothing could be generated
            StoreError: When storing fails
        """
        if item_type == ItemType.FLASHCARD:
            raise ValueError("Use generate_flashcards for flashcard sets")
        return await self._generate(
            material_ids, question_count, item_type, difficulty, chapter_filter, name, description
        )

    async def generate_flashcards(
        self,
        material_ids: Sequence[str],
        card_count: int,
        difficulty: Difficulty = Difficulty.MEDIUM,
        chapter_filter: ChapterFilter | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> GeneratedSet:
        """Generate and store a flashcard set; see generate_quiz."""
        return await self._generate(
            material_ids, card_count, ItemType.FLASHCARD, difficulty, chapter_filter, name, description
        )

    async def derive_flashcards_from_quiz(
        self,
        quiz: GeneratedSet | UUID,
        name: str | None = None,
        description: str | None = None,
    ) -> GeneratedSet:
        """
        Convert a quiz's multiple choice questions into a stored flashcard set.

        Args:
            quiz: Quiz set or the id of a stored quiz
            name: Set name (dated default when None)
            description: Optional description

        Returns:
            GeneratedSet: Stored flashcard set

        Raises:
            ContentError: When the quiz is missing or has no multiple choice questions
            StoreError: When storing fails
        """
        if isinstance(quiz, UUID):
            quiz_id = quiz
            quiz = await self.store.get_generated_set(quiz_id)
            if quiz is None:
                raise ContentError("Quiz not found", {"set_id": str(quiz_id)})

        questions = [item for item in quiz.items if isinstance(item, MultipleChoiceItem)]
        if not questions:
            raise ContentError("No multiple choice questions to derive flashcards from", {"set_id": str(quiz.id)})

        cards = [flashcard_from_question(q) for q in questions]
        flashcard_set = GeneratedSet(
            name=name or default_set_name(SetKind.FLASHCARDS),
            kind=SetKind.FLASHCARDS,
            item_type=ItemType.FLASHCARD,
            difficulty=quiz.difficulty,
            items=cards,
            description=description,
            stats=GenerationStats(
                groups_used=0,
                generation_time_ms=0,
                total_generated=len(cards),
                after_dedup=len(cards),
            ),
        )
        await self.store.insert_generated_set(flashcard_set)
        logger.info(f"{__name__}:derive_flashcards_from_quiz - Derived {len(cards)} flashcards from quiz {quiz.id}")
        return flashcard_set

    async def _generate(
        self,
        material_ids: Sequence[str],
        count: int,
        item_type: ItemType,
        difficulty: Difficulty,
        chapter_filter: ChapterFilter | None,
        name: str | None,
        description: str | None,
    ) -> GeneratedSet:
        if not material_ids:
            raise ContentError("No materials selected")
        if count < 1:
            raise ValueError("count must be at least 1")

        chunks = await self.store.get_chunks_by_material_ids(material_ids)
        chunks = apply_chapter_filter(chunks, chapter_filter)
        if not chunks:
            raise ContentError(
                "No content found in the selected materials",
                {"material_ids": list(material_ids)},
            )
        logger.info(
            f"{__name__}:_generate - {len(chunks)} chunks from {len(material_ids)} materials, "
            f"{count} {item_type.value} items requested"
        )

        plan = await self.planner.plan(chunks, count)
        generated_set = await self.generator.generate_set(
            plan.groups,
            item_type,
            requested_total=count,
            difficulty=difficulty,
            chapter_mode=plan.chapter_mode,
            name=name,
            description=description,
        )
        await self.store.insert_generated_set(generated_set)
        return generated_set
