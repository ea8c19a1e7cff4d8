"""
Math-aware text chunker.

Splits text on structural boundaries and paragraph breaks while keeping
display/inline math, LaTeX environments, theorem-like blocks and fenced
code intact.

Dependencies: re (stdlib)
System role: Default chunker for STEM material
"""

import logging
import re

from study_engine.configs.chunking import ChunkingSettings
from study_engine.core.chunking.base import TextChunk
from study_engine.core.chunking.metadata import (
    contains_math,
    extract_content_metadata,
    extract_section_metadata,
)
from study_engine.core.chunking.tokenizer import ProtectedText
from study_engine.core.models import ChunkMetadata, ContentType

logger = logging.getLogger(__name__)

# Each level is adopted only if it increases the number of segments.
SECTION_PATTERNS = [
    re.compile(r"(?=^#{1,6}\s+.+$)", re.MULTILINE),
    re.compile(r"(?=\\(?:chapter|section|subsection|subsubsection)\{)"),
    re.compile(r"(?=^(?:\d+\.)+\d*\s+[A-Z])", re.MULTILINE),
    re.compile(
        r"(?=^(?:Chapter|Section|Part|Unit|Module|Lesson|Exercise|Example|Problem|Solution|"
        r"Theorem|Definition|Lemma|Proof|Corollary|Proposition)\s+\d*)",
        re.IGNORECASE | re.MULTILINE,
    ),
]

CHAPTER_HEADING = re.compile(
    r"\A\s*(?:#{1,6}\s*)?(?:\\chapter\{\s*)?Chapter\s+(\d+)",
    re.IGNORECASE,
)

MATH_SPAN_KINDS = {"display_math", "inline_math", "latex_env"}
BLOCK_SPAN_KINDS = {"display_math", "latex_env", "theorem_env", "code_block"}


class MathAwareChunker:
    """Chunker that never splits protected math or code spans."""

    def __init__(self, settings: ChunkingSettings | None = None) -> None:
        """
        Initialize chunker.

        Args:
            settings: Chunk size, overlap and minimum size
        """
        self.settings = settings or ChunkingSettings()

    def chunk(self, text: str) -> list[TextChunk]:
        """
        Chunk text.

        Args:
            text: Raw document text

        Returns:
            list[TextChunk]: Chunks in document order, shorter ones dropped
        """
        if not text or not text.strip():
            return []

        document = ProtectedText.from_text(text)
        sections = self._split_by_sections(document)

        chunks: list[TextChunk] = []
        for section, section_meta in self._with_section_metadata(sections):
            for piece in self._split_large_section(section):
                content = piece.render()
                if len(content.strip()) < self.settings.min_chunk_size:
                    continue
                chunks.append(self._build_chunk(piece, content, section_meta))

        logger.debug(
            f"{__name__}:chunk - {len(document.spans)} protected spans, "
            f"{len(sections)} sections, {len(chunks)} chunks"
        )
        return chunks

    def _split_by_sections(self, document: ProtectedText) -> list[ProtectedText]:
        sections = [document]
        for pattern in SECTION_PATTERNS:
            candidate = [piece for section in sections for piece in section.split_before(pattern)]
            if len(candidate) > len(sections):
                sections = candidate
        return [section.strip() for section in sections]

    def _with_section_metadata(
        self, sections: list[ProtectedText]
    ) -> list[tuple[ProtectedText, dict]]:
        """Attach section metadata, carrying chapter headings forward."""
        current_chapter: int | None = None
        current_title: str | None = None
        annotated = []
        for section in sections:
            meta = extract_section_metadata(section.text)
            heading = CHAPTER_HEADING.match(section.text)
            if heading:
                current_chapter = int(heading.group(1))
                current_title = meta.get("chapter_title") if meta.get("chapter") == current_chapter else None
            elif "chapter" not in meta and current_chapter is not None:
                meta["chapter"] = current_chapter
                if current_title:
                    meta["chapter_title"] = current_title
            annotated.append((section, meta))
        return annotated

    def _split_large_section(self, section: ProtectedText) -> list[ProtectedText]:
        """Split an oversized section on paragraph boundaries with overlap."""
        if len(section) <= self.settings.chunk_size:
            return [section]

        pieces: list[ProtectedText] = []
        current = ProtectedText("")
        for paragraph in section.paragraphs():
            if not paragraph.text:
                continue
            potential_size = len(current) + len(paragraph) + 2
            if potential_size > self.settings.chunk_size and len(current) > self.settings.min_chunk_size:
                pieces.append(current)
                overlap = self._overlap_tail(current)
                current = ProtectedText.join("\n\n", [overlap, paragraph]) if overlap.text else paragraph
            elif current.text:
                current = ProtectedText.join("\n\n", [current, paragraph])
            else:
                current = paragraph

        if len(current.text.strip()) >= self.settings.min_chunk_size:
            pieces.append(current)
        return pieces

    def _overlap_tail(self, chunk: ProtectedText) -> ProtectedText:
        """
        Build the overlap carried into the next chunk.

        Whole trailing sentences are preferred; otherwise the last
        ``chunk_overlap`` characters are used. The tail never starts
        inside a protected span and never repeats a block span (display
        math, environments, code), so each block lives in one chunk.

        Args:
            chunk: Chunk just emitted

        Returns:
            ProtectedText: Overlap tail, possibly empty
        """
        overlap = self.settings.chunk_overlap
        if overlap == 0:
            return ProtectedText("")

        last_block_end = max((s.end for s in chunk.spans if s.kind in BLOCK_SPAN_KINDS), default=0)
        start = max(chunk.safe_start(max(0, len(chunk) - overlap * 2)), last_block_end)
        end_portion = chunk.slice(start)
        if not end_portion.text.strip():
            return ProtectedText("")
        sentences = [s.strip() for s in end_portion.sentences()]

        selected: list[ProtectedText] = []
        selected_length = 0
        for sentence in reversed(sentences):
            if selected_length + len(sentence) > overlap:
                break
            selected.insert(0, sentence)
            selected_length = len(ProtectedText.join(" ", selected))

        if selected:
            return ProtectedText.join(" ", selected)

        fallback_start = end_portion.safe_start(max(0, len(end_portion) - overlap))
        return end_portion.slice(fallback_start).strip()

    def _build_chunk(self, piece: ProtectedText, content: str, section_meta: dict) -> TextChunk:
        content_meta = extract_content_metadata(content)
        section_fields = {k: v for k, v in section_meta.items() if k != "content_type"}
        content_type = section_meta.get("content_type", ContentType.TEXT)
        metadata = ChunkMetadata(**{**content_meta, **section_fields})
        has_math = contains_math(content) or any(s.kind in MATH_SPAN_KINDS for s in piece.spans)
        return TextChunk(
            content=content,
            content_type=content_type,
            has_math=has_math,
            metadata=metadata,
        )
