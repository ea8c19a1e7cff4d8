"""
Chunk domain models.

Represents a chunk of study material with deterministic ID, structural
metadata and an optional embedding, plus the groups chunks are
partitioned into before generation.

Dependencies: pydantic, hashlib
System role: Data structures shared by chunking, clustering and grouping
"""

import hashlib
import json
import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class ContentType(str, Enum):
    """Structural classification of a chunk."""

    TEXT = "text"
    THEOREM = "theorem"
    DEFINITION = "definition"
    PROOF = "proof"
    EXAMPLE = "example"
    EXERCISE = "exercise"


class ChunkMetadata(BaseModel):
    """Structural metadata detected in a chunk."""

    chapter: int | None = Field(default=None, description="Detected chapter number")
    chapter_title: str | None = Field(default=None, description="Chapter title")
    section: str | None = Field(default=None, description="Dotted section number")
    title: str | None = Field(default=None, description="Section title")
    key_concepts: list[str] = Field(default_factory=list, max_length=10)
    has_code: bool = False
    has_equations: bool = False
    word_count: int = Field(default=0, ge=0)
    char_count: int = Field(default=0, ge=0)


def make_chunk_id(material_id: str, index: int, content: str) -> str:
    """
    Generate deterministic chunk ID from material, position and content.

    Args:
        material_id: Owning material identifier
        index: Chunk position within the material
        content: Chunk text

    Returns:
        str: SHA-256 prefix of material_id + index + content
    """
    hash_input = f"{material_id}:{index}:{content}"
    return hashlib.sha256(hash_input.encode()).hexdigest()[:16]


class Chunk(BaseModel):
    """Chunk of study material with optional embedding vector."""

    id: str = Field(description="Deterministic chunk identifier")
    material_id: str = Field(description="Owning material identifier")
    index: int = Field(ge=0, description="Position within the material")
    content: str = Field(description="Chunk text content")
    content_type: ContentType = ContentType.TEXT
    has_math: bool = False
    embedding: list[float] | None = Field(default=None, description="Embedding vector")
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)

    @field_validator("embedding", mode="before")
    @classmethod
    def parse_embedding(cls, value: Any) -> Any:
        """Accept vectors delivered as JSON strings, dropping unusable ones."""
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning(f"{__name__}:parse_embedding - Unparseable embedding string dropped")
                return None
        if value is None:
            return None
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(v, (int, float)) and not isinstance(v, bool) for v in value
        ):
            logger.warning(f"{__name__}:parse_embedding - Non-numeric embedding dropped")
            return None
        return list(value)

    @classmethod
    def create(
        cls,
        material_id: str,
        index: int,
        content: str,
        **kwargs: Any,
    ) -> "Chunk":
        """
        Build a chunk with its deterministic ID.

        Args:
            material_id: Owning material identifier
            index: Chunk position within the material
            content: Chunk text
            **kwargs: Remaining Chunk fields

        Returns:
            Chunk: New chunk instance
        """
        return cls(
            id=make_chunk_id(material_id, index, content),
            material_id=material_id,
            index=index,
            content=content,
            **kwargs,
        )


class ChapterGroup(BaseModel):
    """Chunks of one material sharing a chapter number."""

    material_id: str
    chapter: int = Field(ge=0, description="Chapter number, 0 for unlabeled content")
    chapter_title: str
    chunks: list[Chunk] = Field(default_factory=list)


class TopicGroup(BaseModel):
    """Unit of generation work: chunks, their centroid and an item target."""

    chunks: list[Chunk]
    centroid: list[float] | None = None
    target_count: int = Field(default=0, ge=0)
    label: str = ""
    chapter: int | None = None
    chapter_title: str | None = None
    topic_index: int | None = None
