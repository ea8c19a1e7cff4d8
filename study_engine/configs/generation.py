"""
Generation orchestration configuration settings.

Buffer multipliers, per-call ceilings, concurrency, retry and timeout budgets.

Dependencies: pydantic, pydantic_settings
System role: Generation orchestrator configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class GenerationSettings(BaseSettings):
    """Generation orchestrator configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    topic_buffer_multiplier: float = Field(
        default=1.3,
        ge=1.0,
        le=2.0,
        description="Over-generation factor for topic-clustered groups",
    )
    chapter_buffer_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        le=2.0,
        description="Over-generation factor for chapter-based groups",
    )
    max_items_per_call: int = Field(
        default=20,
        gt=0,
        description="Per-call item ceiling to avoid truncated model output",
    )
    concurrency_limit: int = Field(
        default=10,
        gt=0,
        description="Maximum concurrent generation calls",
    )
    group_slack: int = Field(
        default=2,
        ge=0,
        description="Items kept per group beyond its target",
    )
    max_retries: int = Field(default=2, ge=0, description="Retries per task")
    backoff_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="First retry delay; doubles on each retry",
    )
    backoff_max_seconds: float = Field(
        default=8.0,
        ge=0.0,
        description="Upper bound for a single retry delay",
    )
    call_timeout_seconds: float = Field(
        default=90.0,
        gt=0.0,
        description="Deadline for a single generation call",
    )
    task_deadline_seconds: float = Field(
        default=300.0,
        gt=0.0,
        description="Retry budget for one task across all attempts",
    )
    top_pool_size: int = Field(
        default=8,
        gt=0,
        description="Pool of most centroid-similar chunks to sample from",
    )
    representative_count: int = Field(
        default=3,
        gt=0,
        description="Chunks sampled from the top pool",
    )
    variety_count: int = Field(
        default=2,
        ge=0,
        description="Chunks sampled from the rest of the group",
    )
    min_content_chars: int = Field(
        default=50,
        ge=0,
        description="Chunks shorter than this are not used as prompt context",
    )
