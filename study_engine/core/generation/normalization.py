"""
Item normalization.

Turns loosely shaped model output into validated candidate items of the
requested type, repairing common deviations (lowercase option keys, option
arrays, "yes"/"no" answers) and dropping what cannot be repaired.

Dependencies: pydantic
System role: Validation stage between the response parser and the orchestrator
"""

import logging
from typing import Any

from pydantic import ValidationError

from study_engine.core.models import CandidateItem, Difficulty, ItemType, TopicGroup, candidate_item_adapter
from study_engine.core.models.items import OPTION_KEYS

logger = logging.getLogger(__name__)

TRUE_ALIASES = {"true", "yes", "t", "1"}
FALSE_ALIASES = {"false", "no", "f", "0"}
ITEM_DIFFICULTIES = {"easy", "medium", "hard"}


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def normalize_options(raw_options: Any) -> dict[str, str] | None:
    """
    Normalize multiple-choice options to keys A-D.

    Accepts objects keyed A-D, a-d or 1-4, and arrays of at least four
    options.

    Returns:
        dict[str, str] | None: Options, or None when any option is empty
    """
    if isinstance(raw_options, dict):
        options = {}
        for position, key in enumerate(OPTION_KEYS, start=1):
            options[key] = _text(
                raw_options.get(key) or raw_options.get(key.lower()) or raw_options.get(str(position))
            )
    elif isinstance(raw_options, list) and len(raw_options) >= 4:
        options = {key: _text(value) for key, value in zip(OPTION_KEYS, raw_options)}
    else:
        return None

    if not all(options.values()):
        return None
    return options


def normalize_choice_answer(raw_answer: Any, options: dict[str, str]) -> str | None:
    """Map an answer to its option letter; accepts "b", "B)" or the option text."""
    answer = _text(raw_answer)
    if not answer:
        return None
    letter = answer.upper()
    if letter in OPTION_KEYS:
        return letter
    if len(letter) >= 2 and letter[0] in OPTION_KEYS and not letter[1].isalnum():
        return letter[0]
    for key, text in options.items():
        if answer.lower() == text.lower():
            return key
    return None


def normalize_boolean_answer(raw_answer: Any) -> str | None:
    if isinstance(raw_answer, bool):
        return "true" if raw_answer else "false"
    answer = _text(raw_answer).lower()
    if answer in TRUE_ALIASES:
        return "true"
    if answer in FALSE_ALIASES:
        return "false"
    return None


def normalize_difficulty(raw_difficulty: Any, requested: Difficulty) -> str:
    """Use the item's own difficulty when valid, else the requested one (medium for mixed)."""
    value = _text(raw_difficulty).lower()
    if value in ITEM_DIFFICULTIES:
        return value
    if requested.value in ITEM_DIFFICULTIES:
        return requested.value
    return Difficulty.MEDIUM.value


def normalize_item(
    raw: Any,
    item_type: ItemType,
    difficulty: Difficulty,
    source_chunk_ids: list[str],
    group: TopicGroup | None = None,
) -> CandidateItem | None:
    """
    Build a validated candidate item from one raw array element.

    Args:
        raw: Parsed array element
        item_type: Requested item type
        difficulty: Requested difficulty profile
        source_chunk_ids: Chunks the prompt was built from
        group: Group the item was generated for, used for annotation

    Returns:
        CandidateItem | None: Item, or None when it cannot be repaired
    """
    if not isinstance(raw, dict):
        return None

    question = _text(raw.get("question"))
    front = _text(raw.get("front"))
    if not question and not front:
        return None

    data: dict[str, Any] = {
        "item_type": item_type.value,
        "explanation": _text(raw.get("explanation")) or None,
        "difficulty": normalize_difficulty(raw.get("difficulty"), difficulty),
        "topic": _text(raw.get("topic")) or (group.label if group and group.label else None),
        "chapter": group.chapter if group else None,
        "chapter_title": group.chapter_title if group else None,
        "source_chunk_ids": source_chunk_ids,
    }
    raw_answer = raw.get("correct_answer", raw.get("correctAnswer"))

    if item_type == ItemType.MULTIPLE_CHOICE:
        options = normalize_options(raw.get("options"))
        if options is None:
            logger.debug(f"{__name__}:normalize_item - Dropping question without valid options: {question[:50]}")
            return None
        answer = normalize_choice_answer(raw_answer, options)
        if answer is None:
            logger.debug(f"{__name__}:normalize_item - Dropping question with invalid answer {raw_answer!r}")
            return None
        data.update(question=question or front, options=options, correct_answer=answer)
    elif item_type == ItemType.TRUE_FALSE:
        answer = normalize_boolean_answer(raw_answer)
        if answer is None:
            return None
        data.update(question=question or front, correct_answer=answer)
    elif item_type == ItemType.SHORT_ANSWER:
        key_points = raw.get("key_points") or raw.get("keyPoints") or []
        data.update(
            question=question or front,
            model_answer=_text(raw.get("model_answer") or raw.get("modelAnswer") or raw.get("answer")) or None,
            key_points=[_text(p) for p in key_points if _text(p)] if isinstance(key_points, list) else [],
        )
    else:
        back = _text(raw.get("back") or raw.get("answer") or raw.get("definition"))
        data.update(front=front or question, back=back)

    try:
        return candidate_item_adapter.validate_python(data)
    except ValidationError as e:
        logger.debug(f"{__name__}:normalize_item - Dropping invalid item: {e.error_count()} errors")
        return None


def normalize_items(
    raw_items: list[Any],
    item_type: ItemType,
    difficulty: Difficulty,
    source_chunk_ids: list[str],
    group: TopicGroup | None = None,
) -> list[CandidateItem]:
    """Normalize every element, keeping only valid items in order."""
    items = []
    for raw in raw_items:
        item = normalize_item(raw, item_type, difficulty, source_chunk_ids, group)
        if item is not None:
            items.append(item)
    return items
