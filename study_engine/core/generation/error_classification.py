"""
Aggregated generation error classification.

Dependencies: re (stdlib)
System role: Maps task failures to an actionable error category
"""

import re

from study_engine.core.exceptions import ErrorCategory
from study_engine.core.models import TaskResult

AUTH_MARKERS = ("API key", "not configured")
RATE_LIMIT_PATTERN = re.compile(r"\brate\b|rate.?limit|\blimit\b|quota|\b429\b", re.IGNORECASE)

CATEGORY_MESSAGES = {
    ErrorCategory.AUTH: "LLM API is not configured. Please check server configuration.",
    ErrorCategory.RATE_LIMIT: "LLM API rate limit exceeded. Please try again in a few minutes.",
    ErrorCategory.PARSE: "Failed to parse LLM responses. Please try again.",
}


def classify_errors(results: list[TaskResult]) -> tuple[ErrorCategory, str]:
    """
    Classify the errors of failed tasks.

    Credential problems win over rate limits, which win over parse failures.

    Args:
        results: All task results of a run

    Returns:
        tuple[ErrorCategory, str]: Category and a user-facing message
    """
    failures = [r for r in results if r.failed]
    unique_errors = list(dict.fromkeys(r.error for r in failures if r.error))
    types = {r.error_type for r in failures}

    if not unique_errors:
        return (
            ErrorCategory.GENERIC,
            "No valid items were produced. Please try again with different content.",
        )
    if "ConfigurationError" in types or any(m in e for e in unique_errors for m in AUTH_MARKERS):
        category = ErrorCategory.AUTH
    elif "RateLimitError" in types or any(RATE_LIMIT_PATTERN.search(e) for e in unique_errors):
        category = ErrorCategory.RATE_LIMIT
    elif "ResponseParseError" in types or any("JSON" in e for e in unique_errors):
        category = ErrorCategory.PARSE
    else:
        return ErrorCategory.GENERIC, f"Generation failed: {unique_errors[0]}"
    return category, CATEGORY_MESSAGES[category]
