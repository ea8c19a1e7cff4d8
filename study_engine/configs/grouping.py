"""
Chapter grouping configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Chapter grouper and group planner configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class GroupingSettings(BaseSettings):
    """Chapter grouping safeguards and hierarchy settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GROUPING_",
        case_sensitive=False,
        extra="ignore",
    )

    unlabeled_threshold: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="Fall back to clustering when this fraction of chunks has no chapter",
    )
    dominant_threshold: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        description="Fall back to clustering when one chapter holds more than this fraction",
    )
    min_chunks_for_subclustering: int = Field(
        default=4,
        ge=1,
        description="Chapters with at least this many chunks are split into topics",
    )
    general_group_title: str = Field(
        default="General Content",
        description="Title of the group holding chunks without a chapter",
    )
