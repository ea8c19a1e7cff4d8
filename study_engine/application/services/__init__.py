"""Application services."""

from study_engine.application.services.ingestion_service import IngestionResult, IngestionService, sanitize_text
from study_engine.application.services.study_set_service import (
    StudySetService,
    apply_chapter_filter,
    flashcard_from_question,
)

__all__ = [
    "IngestionResult",
    "IngestionService",
    "StudySetService",
    "apply_chapter_filter",
    "flashcard_from_question",
    "sanitize_text",
]
