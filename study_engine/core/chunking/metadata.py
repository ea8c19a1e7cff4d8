"""
Chunk metadata extraction.

Detects chapter and section numbering, section titles, structural content
type, key concepts and math/code presence using pattern heuristics.

Dependencies: re (stdlib)
System role: Metadata stage of the chunkers
"""

import re

from study_engine.core.models import ContentType

CHAPTER_PATTERN = re.compile(r"(?:Chapter|Ch\.?)\s*(\d+)", re.IGNORECASE)
CHAPTER_TITLE_PATTERN = re.compile(
    r"^\s*(?:#{1,6}\s*)?Chapter\s+(\d+)\s*[:.\-\u2013\u2014]\s*(.+?)\s*$",
    re.IGNORECASE | re.MULTILINE,
)
SECTION_PATTERN = re.compile(r"(?:Section|\u00a7)\s*(\d+(?:\.\d+)*)", re.IGNORECASE)
TITLE_PATTERN = re.compile(r"^(?:#{1,6}\s*|\\(?:section|subsection)\{)(.+?)(?:\}|$)", re.MULTILINE)

CONTENT_TYPE_RULES: list[tuple[ContentType, list[re.Pattern[str]]]] = [
    (
        ContentType.THEOREM,
        [re.compile(r"\\begin\{theorem\}", re.I), re.compile(r"^Theorem\s+\d", re.I | re.M)],
    ),
    (
        ContentType.DEFINITION,
        [re.compile(r"\\begin\{definition\}", re.I), re.compile(r"^Definition\s+\d", re.I | re.M)],
    ),
    (
        ContentType.PROOF,
        [re.compile(r"\\begin\{proof\}", re.I), re.compile(r"^Proof[.:]", re.I | re.M)],
    ),
    (
        ContentType.EXAMPLE,
        [re.compile(r"\\begin\{example\}", re.I), re.compile(r"^Example\s+\d", re.I | re.M)],
    ),
    (
        ContentType.EXERCISE,
        [re.compile(r"^Exercise\s+\d", re.I | re.M), re.compile(r"^Problem\s+\d", re.I | re.M)],
    ),
]

BOLD_PATTERN = re.compile(r"\*\*([^*]+)\*\*")
EMPHASIS_PATTERN = re.compile(r"\*([^*]+)\*")
DEFINED_PATTERN = re.compile(r"(?:defined as|is called|known as)\s+[\"']?(\w+)", re.IGNORECASE)
MAX_KEY_CONCEPTS = 10

EQUATION_PATTERN = re.compile(r"\$.*?\$|\\begin\{equation\}|\\begin\{align\}")
CODE_PATTERN = re.compile(r"```|\\begin\{verbatim\}|\\begin\{lstlisting\}")

MATH_PATTERNS = [
    re.compile(r"\$.*?\$"),
    re.compile(r"\$\$[\s\S]*?\$\$"),
    re.compile(r"\\begin\{equation"),
    re.compile(r"\\begin\{align"),
    re.compile(r"\\\[[\s\S]*?\\\]"),
    re.compile(r"\\\([\s\S]*?\\\)"),
    re.compile(r"\\frac\{"),
    re.compile(r"\\sum|\\int|\\prod"),
    re.compile(r"\\alpha|\\beta|\\gamma"),
    re.compile(r"\\mathbb|\\mathcal"),
]


def extract_section_metadata(text: str) -> dict:
    """
    Extract structural metadata from a section.

    Args:
        text: Section text

    Returns:
        dict: Any of chapter, chapter_title, section, title, content_type
    """
    metadata: dict = {}

    chapter_match = CHAPTER_PATTERN.search(text)
    if chapter_match:
        metadata["chapter"] = int(chapter_match.group(1))
        title_match = CHAPTER_TITLE_PATTERN.search(text)
        if title_match and int(title_match.group(1)) == metadata["chapter"]:
            metadata["chapter_title"] = title_match.group(2)

    section_match = SECTION_PATTERN.search(text)
    if section_match:
        metadata["section"] = section_match.group(1)

    title_match = TITLE_PATTERN.search(text)
    if title_match:
        metadata["title"] = title_match.group(1).strip()

    metadata["content_type"] = detect_content_type(text)
    return metadata


def detect_content_type(text: str) -> ContentType:
    """Classify a section as theorem, definition, proof, example, exercise or text."""
    for content_type, patterns in CONTENT_TYPE_RULES:
        if any(p.search(text) for p in patterns):
            return content_type
    return ContentType.TEXT


def extract_key_concepts(text: str) -> list[str]:
    """Collect bold, emphasized and explicitly defined terms (first 10, unique)."""
    candidates = [m.group(1) for m in BOLD_PATTERN.finditer(text)]
    candidates += [m.group(1).replace("*", "") for m in EMPHASIS_PATTERN.finditer(text)]
    candidates += [m.group(1) for m in DEFINED_PATTERN.finditer(text)]

    concepts: list[str] = []
    for term in candidates:
        term = term.strip()
        if term and term not in concepts:
            concepts.append(term)
    return concepts[:MAX_KEY_CONCEPTS]


def contains_math(text: str) -> bool:
    return any(p.search(text) for p in MATH_PATTERNS)


def extract_content_metadata(text: str) -> dict:
    """
    Extract content-level metadata from a finished chunk.

    Args:
        text: Chunk text

    Returns:
        dict: key_concepts, has_equations, has_code, word_count, char_count
    """
    return {
        "key_concepts": extract_key_concepts(text),
        "has_equations": bool(EQUATION_PATTERN.search(text)),
        "has_code": bool(CODE_PATTERN.search(text)),
        "word_count": len(text.split()),
        "char_count": len(text),
    }


def estimate_token_count(text: str) -> int:
    """Rough token estimate (4 characters per token)."""
    return -(-len(text) // 4)
