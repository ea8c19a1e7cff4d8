"""
Topic clustering configuration settings.

Cluster counts are derived from content volume and bounded by
min_clusters/max_clusters.

Dependencies: pydantic, pydantic_settings
System role: Topic clusterer and cluster worker configuration
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class ClusteringSettings(BaseSettings):
    """K-means topic clustering configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLUSTERING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunks_per_topic: int = Field(
        default=8,
        gt=0,
        description="Chunks per topic used to derive the cluster count",
    )
    min_clusters: int = Field(default=2, ge=1, description="Lower bound for k")
    max_clusters: int = Field(default=8, ge=1, description="Upper bound for k")
    max_iterations: int = Field(
        default=10,
        gt=0,
        description="K-means iteration cap",
    )
    executor: Literal["process", "thread"] = Field(
        default="process",
        description="Worker pool type used to run clustering off the event loop",
    )
    max_workers: int = Field(
        default=2,
        gt=0,
        description="Worker pool size",
    )
    seed: int | None = Field(
        default=None,
        description="Random seed for k-means++ (None for non-deterministic runs)",
    )

    @model_validator(mode="after")
    def check_bounds(self) -> "ClusteringSettings":
        """min_clusters may not exceed max_clusters."""
        if self.min_clusters > self.max_clusters:
            raise ValueError("min_clusters must not exceed max_clusters")
        return self
