"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from study_engine.configs.base import BaseSettings
from study_engine.configs.chunking import ChunkingSettings
from study_engine.configs.clustering import ClusteringSettings
from study_engine.configs.database import DatabaseSettings
from study_engine.configs.dedup import DedupSettings
from study_engine.configs.generation import GenerationSettings
from study_engine.configs.grouping import GroupingSettings
from study_engine.configs.llm import LLMSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    grouping: GroupingSettings = Field(default_factory=GroupingSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    dedup: DedupSettings = Field(default_factory=DedupSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached so environment variables are read once.

    Returns:
        Settings: Application settings instance

    Usage:
        from study_engine.configs import get_settings
        settings = get_settings()
    """
    return Settings()
