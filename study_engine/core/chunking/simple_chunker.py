"""
Simple paragraph chunker for non-STEM material.

Dependencies: re (stdlib)
System role: Fallback chunker when no math-aware handling is needed
"""

import re

from study_engine.configs.chunking import ChunkingSettings
from study_engine.core.chunking.base import TextChunk
from study_engine.core.chunking.metadata import extract_content_metadata, extract_section_metadata
from study_engine.core.models import ChunkMetadata, ContentType

PARAGRAPH_BREAK = re.compile(r"\n\n+")


class SimpleChunker:
    """Accumulate paragraphs up to the chunk size; overlap is a word tail."""

    def __init__(self, settings: ChunkingSettings | None = None) -> None:
        self.settings = settings or ChunkingSettings()

    def chunk(self, text: str) -> list[TextChunk]:
        """
        Chunk text on paragraph boundaries.

        Args:
            text: Raw document text

        Returns:
            list[TextChunk]: Non-empty chunks in document order
        """
        if not text or not text.strip():
            return []

        contents: list[str] = []
        current = ""
        for paragraph in PARAGRAPH_BREAK.split(text):
            if current and len(current) + len(paragraph) > self.settings.chunk_size:
                contents.append(current.strip())
                current = self._word_tail(current) + "\n\n" + paragraph
            else:
                current += ("\n\n" if current else "") + paragraph
        if current.strip():
            contents.append(current.strip())

        return [self._build_chunk(content) for content in contents if content]

    def _word_tail(self, text: str) -> str:
        words = self.settings.simple_overlap_words
        if words == 0:
            return ""
        return " ".join(text.split(" ")[-words:])

    def _build_chunk(self, content: str) -> TextChunk:
        section_meta = extract_section_metadata(content)
        content_type = section_meta.pop("content_type", ContentType.TEXT)
        metadata = ChunkMetadata(**{**extract_content_metadata(content), **section_meta})
        return TextChunk(content=content, content_type=content_type, has_math=False, metadata=metadata)
