"""
Topic clustering with k-means on chunk embeddings.

K-means++ seeding and assignment both use cosine similarity; centroids
are the element-wise mean of member embeddings.

Dependencies: numpy
System role: Partitions chunks into topic groups for balanced generation
"""

import logging
import math
from collections import Counter

import numpy as np

from study_engine.configs.clustering import ClusteringSettings
from study_engine.core.models import Chunk, TopicGroup

logger = logging.getLogger(__name__)


def choose_cluster_count(total_chunks: int, settings: ClusteringSettings | None = None) -> int:
    """
    Derive k from content volume.

    Args:
        total_chunks: Number of chunks to cluster
        settings: Chunks-per-topic ratio and k bounds

    Returns:
        int: ceil(total / chunks_per_topic) clamped to [min_clusters, max_clusters]
    """
    settings = settings or ClusteringSettings()
    k = math.ceil(total_chunks / settings.chunks_per_topic)
    return max(settings.min_clusters, min(settings.max_clusters, k))


def cosine_similarity(a: np.ndarray | list[float], b: np.ndarray | list[float]) -> float:
    """Cosine similarity of two vectors; 0.0 for mismatched or zero vectors."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return 0.0
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.dot(a, b) / norm)


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)


def split_valid_embeddings(chunks: list[Chunk]) -> tuple[list[int], list[int], np.ndarray | None]:
    """
    Separate chunks with usable embeddings from the rest.

    An embedding is usable when present, finite, non-zero and of the
    dimensionality shared by most embedded chunks.

    Args:
        chunks: Chunks to inspect

    Returns:
        tuple: (valid indices, invalid indices, matrix of valid embeddings or None)
    """
    candidates: dict[int, np.ndarray] = {}
    for i, chunk in enumerate(chunks):
        if not chunk.embedding:
            continue
        vector = np.asarray(chunk.embedding, dtype=float)
        if not np.all(np.isfinite(vector)) or not np.any(vector):
            continue
        candidates[i] = vector

    if not candidates:
        return [], list(range(len(chunks))), None

    dimension = Counter(v.shape[0] for v in candidates.values()).most_common(1)[0][0]
    valid = [i for i, v in candidates.items() if v.shape[0] == dimension]
    valid_set = set(valid)
    invalid = [i for i in range(len(chunks)) if i not in valid_set]
    matrix = np.vstack([candidates[i] for i in valid])
    return valid, invalid, matrix


def kmeans_plus_plus(unit_vectors: np.ndarray, k: int, rng: np.random.Generator) -> list[int]:
    """
    Pick initial centroid indices with k-means++ seeding.

    The first index is uniform; each next index is sampled proportionally
    to the squared cosine distance to its nearest chosen centroid. Seeding
    stops early when every remaining weight is zero.

    Args:
        unit_vectors: Row-normalized embeddings
        k: Desired number of centroids
        rng: Random generator

    Returns:
        list[int]: Chosen row indices (at most k)
    """
    n = unit_vectors.shape[0]
    chosen = [int(rng.integers(n))]
    nearest = unit_vectors @ unit_vectors[chosen[0]]

    while len(chosen) < k:
        weights = np.clip(1.0 - nearest, 0.0, None) ** 2
        weights[chosen] = 0.0
        total = weights.sum()
        if total <= 0:
            break
        index = int(rng.choice(n, p=weights / total))
        chosen.append(index)
        nearest = np.maximum(nearest, unit_vectors @ unit_vectors[index])
    return chosen


def kmeans(
    vectors: np.ndarray,
    k: int,
    max_iterations: int = 10,
    rng: np.random.Generator | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Run k-means with cosine assignment.

    Args:
        vectors: Embedding matrix (n x d)
        k: Number of clusters
        max_iterations: Iteration cap
        rng: Random generator for seeding

    Returns:
        tuple: (assignments of length n, centroid matrix)
    """
    rng = rng or np.random.default_rng()
    unit_vectors = _unit_rows(vectors)
    centroids = vectors[kmeans_plus_plus(unit_vectors, k, rng)].copy()
    assignments = np.full(vectors.shape[0], -1)

    for iteration in range(max_iterations):
        similarities = unit_vectors @ _unit_rows(centroids).T
        new_assignments = np.argmax(similarities, axis=1)
        if np.array_equal(new_assignments, assignments):
            logger.debug(f"{__name__}:kmeans - Converged after {iteration} iterations")
            break
        assignments = new_assignments

        for c in range(centroids.shape[0]):
            members = vectors[assignments == c]
            if len(members):
                centroids[c] = members.mean(axis=0)

    return assignments, centroids


def cluster_chunks_by_topic(
    chunks: list[Chunk],
    k: int,
    settings: ClusteringSettings | None = None,
    seed: int | None = None,
) -> list[TopicGroup]:
    """
    Partition chunks into at most k topic groups.

    Args:
        chunks: Chunks with embeddings
        k: Requested number of clusters
        settings: Iteration cap and default seed
        seed: Random seed overriding the settings seed

    Returns:
        list[TopicGroup]: Non-empty groups sorted by size, largest first.
            Every input chunk appears in exactly one group.
    """
    settings = settings or ClusteringSettings()
    if not chunks:
        return []

    valid, invalid, matrix = split_valid_embeddings(chunks)
    if matrix is None:
        logger.warning(f"{__name__}:cluster_chunks_by_topic - No valid embeddings, using a single group")
        return [TopicGroup(chunks=list(chunks), centroid=None)]

    if k <= 1:
        return [TopicGroup(chunks=list(chunks), centroid=matrix.mean(axis=0).tolist())]

    if len(valid) <= k:
        groups = [TopicGroup(chunks=[chunks[i]], centroid=matrix[row].tolist()) for row, i in enumerate(valid)]
    else:
        rng = np.random.default_rng(seed if seed is not None else settings.seed)
        assignments, centroids = kmeans(matrix, k, settings.max_iterations, rng)
        groups = []
        for c in range(centroids.shape[0]):
            members = [chunks[valid[row]] for row in np.flatnonzero(assignments == c)]
            if members:
                groups.append(TopicGroup(chunks=members, centroid=centroids[c].tolist()))
        groups.sort(key=lambda g: len(g.chunks), reverse=True)

    if invalid:
        logger.info(
            f"{__name__}:cluster_chunks_by_topic - {len(invalid)} chunks without valid "
            f"embeddings added to the largest group"
        )
        groups[0].chunks.extend(chunks[i] for i in invalid)

    logger.info(
        f"{__name__}:cluster_chunks_by_topic - {len(chunks)} chunks into {len(groups)} groups "
        f"(sizes: {[len(g.chunks) for g in groups]})"
    )
    return groups
