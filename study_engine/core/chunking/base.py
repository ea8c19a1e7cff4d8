"""
Shared chunker output type.

Dependencies: dataclasses (stdlib)
System role: Common return type of the math-aware and simple chunkers
"""

from dataclasses import dataclass, field

from study_engine.core.models import ChunkMetadata, ContentType


@dataclass
class TextChunk:
    """Chunk text with detected metadata, before it is bound to a material."""

    content: str
    content_type: ContentType = ContentType.TEXT
    has_math: bool = False
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)
