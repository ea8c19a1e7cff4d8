"""
Protected-span tokenizer.

Tags math, theorem-like and code spans in a text so that structural and
paragraph splitting never cuts through them. Spans are tracked as offsets
into the original text; no placeholder strings are substituted, so the
original characters are always what gets emitted.

Dependencies: re (stdlib)
System role: First pass of the math-aware chunker
"""

import re
from dataclasses import dataclass
from typing import Iterator, Pattern

MASK_CHAR = "\x00"

# Priority order: a later pattern never matches inside an earlier span.
PROTECTED_PATTERNS: list[tuple[str, Pattern[str]]] = [
    ("display_math", re.compile(r"\$\$[\s\S]*?\$\$")),
    (
        "latex_env",
        re.compile(
            r"\\begin\{(equation|align|gather|matrix|bmatrix|pmatrix|cases|array|eqnarray)\*?\}"
            r"[\s\S]*?\\end\{\1\*?\}"
        ),
    ),
    (
        "theorem_env",
        re.compile(
            r"\\begin\{(theorem|definition|lemma|proposition|corollary|proof|example|remark|note)\*?\}"
            r"[\s\S]*?\\end\{\1\*?\}"
        ),
    ),
    ("code_block", re.compile(r"```[\s\S]*?```")),
    ("inline_math", re.compile(r"(?<!\$)\$(?!\$)([^$\n]+?)\$(?!\$)")),
    ("inline_math", re.compile(r"\\\([\s\S]*?\\\)")),
    ("display_math", re.compile(r"\\\[[\s\S]*?\\\]")),
]

SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
PARAGRAPH_BREAK = re.compile(r"\n\n+")


@dataclass(frozen=True)
class Span:
    """Half-open protected range [start, end) in a text."""

    start: int
    end: int
    kind: str

    def contains(self, position: int) -> bool:
        """True when a cut at ``position`` would fall strictly inside the span."""
        return self.start < position < self.end


@dataclass(frozen=True)
class Token:
    """Piece of a text: either plain text or one protected span."""

    text: str
    kind: str

    @property
    def protected(self) -> bool:
        return self.kind != "text"


def detect_protected_spans(text: str) -> tuple[Span, ...]:
    """
    Find protected spans in priority order.

    Each pattern runs over a copy of the text in which earlier spans are
    masked, so later patterns cannot start or end inside them. A later
    match that encloses earlier spans absorbs them.

    Args:
        text: Original text

    Returns:
        tuple[Span, ...]: Non-overlapping spans sorted by start offset
    """
    spans: list[Span] = []
    masked = text
    for kind, pattern in PROTECTED_PATTERNS:
        found = [m for m in pattern.finditer(masked) if m.end() > m.start()]
        if not found:
            continue
        for match in found:
            start, end = match.span()
            spans = [s for s in spans if not (start <= s.start and s.end <= end)]
            spans.append(Span(start, end, kind))
        spans.sort(key=lambda s: s.start)
        masked = _mask(text, spans)
    return tuple(spans)


def _mask(text: str, spans: list[Span]) -> str:
    parts = []
    cursor = 0
    for span in spans:
        parts.append(text[cursor : span.start])
        parts.append(MASK_CHAR * (span.end - span.start))
        cursor = span.end
    parts.append(text[cursor:])
    return "".join(parts)


class ProtectedText:
    """Text paired with the protected spans it contains.

    Slicing, stripping and joining keep span offsets aligned with the text,
    so a chunk built from pieces still knows which ranges are atomic.
    """

    def __init__(self, text: str, spans: tuple[Span, ...] = ()) -> None:
        self.text = text
        self.spans = spans

    @classmethod
    def from_text(cls, text: str) -> "ProtectedText":
        """Tokenize raw text, detecting its protected spans."""
        return cls(text, detect_protected_spans(text))

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"ProtectedText({self.text[:40]!r}..., spans={len(self.spans)})"

    def span_at(self, position: int) -> Span | None:
        """Return the span a cut at ``position`` would break, if any."""
        for span in self.spans:
            if span.contains(position):
                return span
            if span.start >= position:
                break
        return None

    def is_safe_cut(self, position: int) -> bool:
        return self.span_at(position) is None

    def safe_start(self, position: int) -> int:
        """Move a start offset forward past any span it falls inside."""
        span = self.span_at(position)
        return span.end if span else position

    def slice(self, start: int, end: int | None = None) -> "ProtectedText":
        """Return the sub-text [start, end) with spans shifted to match."""
        end = len(self.text) if end is None else end
        spans = tuple(
            Span(s.start - start, s.end - start, s.kind)
            for s in self.spans
            if s.start >= start and s.end <= end
        )
        return ProtectedText(self.text[start:end], spans)

    def strip(self) -> "ProtectedText":
        """Strip surrounding whitespace, keeping spans aligned."""
        stripped_left = self.text.lstrip()
        start = len(self.text) - len(stripped_left)
        end = start + len(stripped_left.rstrip())
        return self.slice(start, end)

    def split(self, pattern: Pattern[str], keep_separator: bool = False) -> list["ProtectedText"]:
        """
        Split at pattern matches that do not cut a protected span.

        Args:
            pattern: Separator or zero-width boundary pattern
            keep_separator: Keep the matched text at the start of the next piece

        Returns:
            list[ProtectedText]: Non-empty pieces in order
        """
        pieces: list[ProtectedText] = []
        cursor = 0
        for match in pattern.finditer(self.text):
            start, end = match.span()
            if start == 0 and end == 0:
                continue
            if not self.is_safe_cut(start) or not self.is_safe_cut(end):
                continue
            pieces.append(self.slice(cursor, start))
            cursor = start if keep_separator else end
        pieces.append(self.slice(cursor))
        return [p for p in pieces if p.text.strip()]

    def split_before(self, pattern: Pattern[str]) -> list["ProtectedText"]:
        """Split before each occurrence of a zero-width boundary pattern."""
        return self.split(pattern, keep_separator=True)

    def paragraphs(self) -> list["ProtectedText"]:
        """Split on blank lines outside protected spans, stripping each paragraph."""
        return [p.strip() for p in self.split(PARAGRAPH_BREAK)]

    def sentences(self) -> list["ProtectedText"]:
        """Split after sentence-ending punctuation outside protected spans."""
        return self.split(SENTENCE_BREAK)

    @staticmethod
    def join(separator: str, parts: list["ProtectedText"]) -> "ProtectedText":
        """Concatenate pieces with a plain separator, shifting their spans."""
        texts: list[str] = []
        spans: list[Span] = []
        offset = 0
        for i, part in enumerate(parts):
            if i:
                texts.append(separator)
                offset += len(separator)
            texts.append(part.text)
            spans.extend(Span(s.start + offset, s.end + offset, s.kind) for s in part.spans)
            offset += len(part.text)
        return ProtectedText("".join(texts), tuple(spans))

    def tokens(self) -> Iterator[Token]:
        """Yield plain and protected tokens whose concatenation is the text."""
        cursor = 0
        for span in self.spans:
            if span.start > cursor:
                yield Token(self.text[cursor : span.start], "text")
            yield Token(self.text[span.start : span.end], span.kind)
            cursor = span.end
        if cursor < len(self.text):
            yield Token(self.text[cursor:], "text")

    def render(self) -> str:
        """Reconstruct the text from its tokens."""
        return "".join(token.text for token in self.tokens())
