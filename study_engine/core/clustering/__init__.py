"""Topic clustering: k-means over chunk embeddings and the async cluster worker."""

from study_engine.core.clustering.kmeans import (
    choose_cluster_count,
    cluster_chunks_by_topic,
    cosine_similarity,
)
from study_engine.core.clustering.worker import (
    ClusterRequest,
    ClusterResponse,
    ClusterWorker,
    run_cluster_job,
)

__all__ = [
    "ClusterRequest",
    "ClusterResponse",
    "ClusterWorker",
    "choose_cluster_count",
    "cluster_chunks_by_topic",
    "cosine_similarity",
    "run_cluster_job",
]
