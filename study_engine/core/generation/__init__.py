"""
Generation package.

Task splitting, bounded-concurrency orchestration, retries, tolerant
parsing and item normalization.
"""

from study_engine.core.generation.chunk_selection import filter_content_chunks, select_chunks
from study_engine.core.generation.error_classification import classify_errors
from study_engine.core.generation.normalization import normalize_item, normalize_items
from study_engine.core.generation.orchestrator import GenerationOrchestrator, OrchestrationResult
from study_engine.core.generation.prompts import build_generation_prompt
from study_engine.core.generation.response_parser import parse_json_array
from study_engine.core.generation.retry_policy import RetryPolicy, is_terminal_error
from study_engine.core.generation.set_generator import SetGenerator, assign_targets

__all__ = [
    "GenerationOrchestrator",
    "OrchestrationResult",
    "RetryPolicy",
    "SetGenerator",
    "assign_targets",
    "build_generation_prompt",
    "classify_errors",
    "filter_content_chunks",
    "is_terminal_error",
    "normalize_item",
    "normalize_items",
    "parse_json_array",
    "select_chunks",
]
