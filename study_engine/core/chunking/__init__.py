"""
Chunking package.

Math-aware and simple chunkers, protected-span tokenizer, STEM
classification and metadata extraction.
"""

from study_engine.core.chunking.base import TextChunk
from study_engine.core.chunking.chunker import chunk_text, get_chunker
from study_engine.core.chunking.classifier import StemClassification, detect_stem_content
from study_engine.core.chunking.math_chunker import MathAwareChunker
from study_engine.core.chunking.metadata import estimate_token_count
from study_engine.core.chunking.simple_chunker import SimpleChunker
from study_engine.core.chunking.tokenizer import ProtectedText, Span, Token

__all__ = [
    "MathAwareChunker",
    "ProtectedText",
    "SimpleChunker",
    "Span",
    "StemClassification",
    "TextChunk",
    "Token",
    "chunk_text",
    "detect_stem_content",
    "estimate_token_count",
    "get_chunker",
]
