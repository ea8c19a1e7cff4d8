"""Near-duplicate removal for generated items."""

from study_engine.core.dedup.deduplicator import Deduplicator, text_similarity

__all__ = ["Deduplicator", "text_similarity"]
