"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from study_engine.configs.chunking import ChunkingSettings
from study_engine.configs.clustering import ClusteringSettings
from study_engine.configs.database import DatabaseSettings
from study_engine.configs.dedup import DedupSettings
from study_engine.configs.generation import GenerationSettings
from study_engine.configs.grouping import GroupingSettings
from study_engine.configs.llm import LLMSettings
from study_engine.configs.settings import Settings, get_settings

__all__ = [
    "ChunkingSettings",
    "ClusteringSettings",
    "DatabaseSettings",
    "DedupSettings",
    "GenerationSettings",
    "GroupingSettings",
    "LLMSettings",
    "Settings",
    "get_settings",
]
