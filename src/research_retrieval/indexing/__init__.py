"""Indexing components: chunking and the ingestion pipeline."""

from .chunker import ParagraphChunker, TextChunk, chunk_text, strip_markup
from .pipeline import IngestionPipeline, IngestionResult

__all__ = [
    "ParagraphChunker",
    "TextChunk",
    "chunk_text",
    "strip_markup",
    "IngestionPipeline",
    "IngestionResult",
]
