"""
Tolerant JSON-array parser for model responses.

Models do not reliably return bare JSON, so candidates are tried in order:
the outermost bracketed span, a fenced code block, the whole response,
and finally a truncated array closed after its last complete object.

Dependencies: json, re (stdlib)
System role: Single parser for every generation call
"""

import json
import logging
import re
from typing import Any, Iterator

from study_engine.core.exceptions import ResponseParseError

logger = logging.getLogger(__name__)

ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
PREVIEW_LENGTH = 200


def iter_array_candidates(response: str) -> Iterator[str]:
    """Yield JSON-array candidate strings in fallback order."""
    match = ARRAY_PATTERN.search(response)
    if match:
        yield match.group(0)

    block = CODE_BLOCK_PATTERN.search(response)
    if block:
        content = block.group(1).strip()
        if content.startswith("["):
            yield content

    trimmed = response.strip()
    if trimmed.startswith("[") and trimmed.endswith("]"):
        yield trimmed

    if trimmed.startswith("["):
        last_object_end = trimmed.rfind("}")
        if last_object_end > 0:
            yield trimmed[: last_object_end + 1] + "]"


def parse_json_array(response: str | None) -> list[Any]:
    """
    Extract a JSON array from a model response.

    Args:
        response: Raw model output

    Returns:
        list: Parsed array elements

    Raises:
        ResponseParseError: When no candidate parses to a list
    """
    if not isinstance(response, str) or not response.strip():
        raise ResponseParseError("Empty or invalid LLM response")

    last_error: json.JSONDecodeError | None = None
    for candidate in iter_array_candidates(response):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        if isinstance(parsed, list):
            return parsed

    preview = response[:PREVIEW_LENGTH]
    if last_error is not None:
        logger.warning(f"{__name__}:parse_json_array - JSON parse error: {last_error}")
        raise ResponseParseError(f"JSON parse failed: {last_error}", details={"preview": preview})
    logger.warning(f"{__name__}:parse_json_array - No JSON array found. Preview: {preview}")
    raise ResponseParseError("No JSON array in LLM response", details={"preview": preview})
