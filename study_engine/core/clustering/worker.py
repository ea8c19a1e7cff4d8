"""
Cluster worker.

Runs k-means outside the event loop in a process (default) or thread pool.
Requests and responses cross the pool boundary as plain dict copies.

Dependencies: concurrent.futures, asyncio, pydantic
System role: Keeps CPU-bound clustering off the request-handling path
"""

import asyncio
import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any

from pydantic import BaseModel, Field

from study_engine.configs.clustering import ClusteringSettings
from study_engine.core.clustering.kmeans import cluster_chunks_by_topic
from study_engine.core.exceptions import ClusteringError
from study_engine.core.models import Chunk, TopicGroup

logger = logging.getLogger(__name__)


class ClusterRequest(BaseModel):
    """Message submitted to the worker."""

    chunks: list[dict[str, Any]]
    k: int = Field(ge=1)
    max_iterations: int = Field(default=10, gt=0)
    seed: int | None = None


class ClusterResponse(BaseModel):
    """Single message returned by the worker: groups or an error."""

    success: bool
    groups: list[dict[str, Any]] | None = None
    error: str | None = None


def run_cluster_job(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Worker entry point.

    Args:
        payload: Serialized ClusterRequest

    Returns:
        dict: Serialized ClusterResponse
    """
    try:
        request = ClusterRequest.model_validate(payload)
        chunks = [Chunk.model_validate(c) for c in request.chunks]
        settings = ClusteringSettings(max_iterations=request.max_iterations)
        groups = cluster_chunks_by_topic(chunks, request.k, settings, seed=request.seed)
        return ClusterResponse(success=True, groups=[g.model_dump() for g in groups]).model_dump()
    except Exception as e:
        return ClusterResponse(success=False, error=f"{type(e).__name__}: {e}").model_dump()


class ClusterWorker:
    """Async facade over a pool executing clustering jobs."""

    def __init__(
        self,
        settings: ClusteringSettings | None = None,
        executor: Executor | None = None,
    ) -> None:
        """
        Initialize worker.

        Args:
            settings: Pool type, pool size, iteration cap and seed
            executor: Pre-built executor; created lazily from settings when None
        """
        self.settings = settings or ClusteringSettings()
        self._executor = executor
        self._owns_executor = executor is None

    def _get_executor(self) -> Executor:
        if self._executor is None:
            if self.settings.executor == "process":
                self._executor = ProcessPoolExecutor(max_workers=self.settings.max_workers)
            else:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers,
                    thread_name_prefix="cluster-worker",
                )
            logger.info(
                f"{__name__}:_get_executor - Started {self.settings.executor} pool "
                f"with {self.settings.max_workers} workers"
            )
        return self._executor

    async def cluster(self, chunks: list[Chunk], k: int) -> list[TopicGroup]:
        """
        Cluster chunks in the pool and await the single response message.

        Args:
            chunks: Chunks with embeddings
            k: Requested number of clusters

        Returns:
            list[TopicGroup]: Topic groups, largest first

        Raises:
            ClusteringError: When the job fails or the pool breaks
        """
        if not chunks:
            return []

        request = ClusterRequest(
            chunks=[chunk.model_dump() for chunk in chunks],
            k=max(1, k),
            max_iterations=self.settings.max_iterations,
            seed=self.settings.seed,
        )
        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(self._get_executor(), run_cluster_job, request.model_dump())
        except Exception as e:
            logger.error(f"{__name__}:cluster - Worker failed: {e}")
            raise ClusteringError("Cluster worker failed", {"error": str(e), "chunks": len(chunks)}) from e

        response = ClusterResponse.model_validate(payload)
        if not response.success:
            logger.error(f"{__name__}:cluster - Clustering failed: {response.error}")
            raise ClusteringError("Clustering failed", {"error": response.error, "chunks": len(chunks)})
        return [TopicGroup.model_validate(group) for group in response.groups or []]

    def shutdown(self, wait: bool = True) -> None:
        """Shut down an owned pool."""
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=wait)
            self._executor = None

    async def __aenter__(self) -> "ClusterWorker":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.shutdown()
