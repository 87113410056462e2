"""
Chunking utilities for embedding workspace text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..config import DEFAULT_CHUNK_SIZE

_PARAGRAPH_RE = re.compile(r"[^\n]+")
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextChunk:
    """A content chunk with source offsets."""

    text: str
    position: int
    start_char: int
    end_char: int


class ParagraphChunker:
    """
    Paragraph-based chunker with hard slicing for long paragraphs.

    Text is split on runs of newlines; each trimmed, non-empty paragraph is
    one chunk, unless it is longer than ``max_chars``, in which case it is cut
    into consecutive ``max_chars`` slices. There is no overlap.
    """

    def __init__(self, max_chars: int = DEFAULT_CHUNK_SIZE) -> None:
        if max_chars <= 0:
            raise ValueError("max_chars must be > 0")
        self.max_chars = max_chars

    def chunk_text(self, text: str | None) -> list[TextChunk]:
        if not text:
            return []

        chunks: list[TextChunk] = []
        for match in _PARAGRAPH_RE.finditer(text):
            raw = match.group()
            paragraph = raw.strip()
            if not paragraph:
                continue
            offset = match.start() + (len(raw) - len(raw.lstrip()))

            for start in range(0, len(paragraph), self.max_chars):
                piece = paragraph[start : start + self.max_chars]
                chunks.append(
                    TextChunk(
                        text=piece,
                        position=len(chunks),
                        start_char=offset + start,
                        end_char=offset + start + len(piece),
                    )
                )
        return chunks


def chunk_text(text: str | None, max_chars: int = DEFAULT_CHUNK_SIZE) -> list[TextChunk]:
    """Split *text* into ordered chunks of at most *max_chars* characters."""
    return ParagraphChunker(max_chars).chunk_text(text)


def strip_markup(content: str | None) -> str:
    """Drop HTML tags and collapse whitespace, e.g. for editor documents."""
    if not content:
        return ""
    without_tags = _TAG_RE.sub(" ", content)
    return _WHITESPACE_RE.sub(" ", without_tags).strip()
