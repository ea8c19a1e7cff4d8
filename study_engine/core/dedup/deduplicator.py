"""
Near-duplicate removal for generated items.

A word-set Jaccard pre-filter drops obvious duplicates without embedding;
the remaining primary texts are embedded in one batch and accepted greedily
unless too similar to an already accepted item.

Dependencies: numpy, study_engine.boundary.embeddings
System role: Final quality filter before a set is stored
"""

import logging
import time
from typing import Sequence

import numpy as np

from study_engine.boundary.embeddings import EmbeddingClient
from study_engine.configs.dedup import DedupSettings
from study_engine.core.exceptions import EmbeddingError
from study_engine.core.models import CandidateItem

logger = logging.getLogger(__name__)


def word_set(text: str) -> set[str]:
    return {w for w in text.lower().split() if len(w) > 2}


def text_similarity(first: str, second: str) -> float:
    """Jaccard similarity of the words longer than two characters."""
    words_first = word_set(first)
    words_second = word_set(second)
    union = words_first | words_second
    if not union:
        return 0.0
    return len(words_first & words_second) / len(union)


class Deduplicator:
    """Greedy near-duplicate filter; first occurrences always survive."""

    def __init__(self, embedding_client: EmbeddingClient, settings: DedupSettings | None = None) -> None:
        """
        Initialize deduplicator.

        Args:
            embedding_client: Embeds item primary texts
            settings: Similarity thresholds
        """
        self.embedding_client = embedding_client
        self.settings = settings or DedupSettings()

    def prefilter(self, items: Sequence[CandidateItem]) -> list[CandidateItem]:
        """Drop items whose text overlaps an earlier survivor above the text threshold."""
        survivors: list[CandidateItem] = []
        survivor_words: list[set[str]] = []
        threshold = self.settings.text_similarity_threshold
        for item in items:
            words = word_set(item.primary_text)
            duplicate = False
            for earlier in survivor_words:
                union = words | earlier
                if union and len(words & earlier) / len(union) > threshold:
                    duplicate = True
                    break
            if not duplicate:
                survivors.append(item)
                survivor_words.append(words)
        return survivors

    async def deduplicate(self, items: Sequence[CandidateItem]) -> list[CandidateItem]:
        """
        Remove near-duplicates, preserving order.

        Args:
            items: Candidate items in generation order

        Returns:
            list: Unique items; running this on its own output removes nothing

        Raises:
            EmbeddingError: When the embedding batch is unusable
        """
        if len(items) <= 1:
            return list(items)

        start = time.perf_counter()
        candidates = self.prefilter(items) if self.settings.enable_text_prefilter else list(items)
        if len(candidates) < len(items):
            logger.info(f"{__name__}:deduplicate - Pre-filter removed {len(items) - len(candidates)} obvious duplicates")

        if len(candidates) < self.settings.min_candidates_for_embedding:
            logger.info(f"{__name__}:deduplicate - Skipping embedding pass ({len(candidates)} candidates)")
            return candidates

        vectors = await self.embedding_client.embed_batch([item.primary_text for item in candidates])
        if len(vectors) != len(candidates):
            raise EmbeddingError(
                "Embedding batch size mismatch",
                {"expected": len(candidates), "received": len(vectors)},
            )

        matrix = np.asarray(vectors, dtype=float)
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        unit = np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)

        accepted: list[int] = []
        for i in range(len(candidates)):
            if accepted and np.max(unit[accepted] @ unit[i]) > self.settings.similarity_threshold:
                continue
            accepted.append(i)

        unique = [candidates[i] for i in accepted]
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{__name__}:deduplicate - Kept {len(unique)} unique items "
            f"(removed {len(items) - len(unique)} duplicates) in {elapsed_ms:.0f}ms"
        )
        return unique
