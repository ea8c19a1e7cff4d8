"""
Material chunk ORM model.

Stores chunked study material with its embedding and extracted metadata.

Dependencies: sqlalchemy, study_engine.boundary.db.base
System role: Persistence of ingested chunks for later generation
"""

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from study_engine.boundary.db.base import Base, TimestampMixin


class MaterialChunkModel(Base, TimestampMixin):
    """
    Chunk ORM model.

    The primary key is the deterministic chunk id, so re-ingesting the
    same material produces the same ids.

    Attributes:
        id: Chunk id (hash of material, index and content)
        material_id: Owning material identifier
        chunk_index: Position within the material
        content: Chunk text
        content_type: Structural classification
        has_math: Whether the chunk contains mathematical notation
        embedding: Embedding vector as a JSON list (nullable)
        token_count: Estimated tokens, ceil(chars / 4)
        chunk_metadata: Chapter, section and content metadata ("metadata" column)
    """

    __tablename__ = "material_chunks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    material_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(32), nullable=False, default="text")
    has_math: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    embedding: Mapped[list | None] = mapped_column(JSON, nullable=True)
    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chunk_metadata: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
