"""
Deduplication configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Deduplicator configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class DedupSettings(BaseSettings):
    """Near-duplicate removal thresholds."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DEDUP_",
        case_sensitive=False,
        extra="ignore",
    )

    similarity_threshold: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        description="Cosine similarity above which an item is a duplicate",
    )
    text_similarity_threshold: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Word-set Jaccard similarity above which an item is a duplicate",
    )
    min_candidates_for_embedding: int = Field(
        default=6,
        ge=0,
        description="Embedding comparison runs only with at least this many candidates",
    )
    enable_text_prefilter: bool = Field(
        default=True,
        description="Remove obvious lexical duplicates before embedding",
    )
