"""
Chunking configuration settings.

Controls chunk size, overlap, and the minimum size a chunk must reach
to be kept.

Dependencies: pydantic, pydantic_settings
System role: Chunker configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Chunker configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Target chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap carried from the previous chunk in characters",
    )
    min_chunk_size: int = Field(
        default=100,
        ge=0,
        description="Chunks shorter than this are dropped",
    )
    simple_overlap_words: int = Field(
        default=30,
        ge=0,
        description="Words carried over between chunks by the simple chunker",
    )
    stem_threshold: int = Field(
        default=40,
        ge=0,
        le=100,
        description="Minimum STEM confidence for math-aware chunking",
    )

    @model_validator(mode="after")
    def check_overlap(self) -> "ChunkingSettings":
        """Overlap must stay below the chunk size."""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
