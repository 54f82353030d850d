"""Chunking for manuals and maintenance notes.

Manuals here are often Japanese text without whitespace between words, so
chunks are measured in characters rather than words.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.assistant.document import Document


@dataclass(frozen=True, slots=True)
class TextSpan:
    text: str
    start_index: int
    end_index: int


class CharacterChunker:
    """Split text into fixed-size character windows with overlap.

    Windows advance by ``chunk_size - overlap`` characters, so consecutive
    chunks share ``overlap`` characters. Whitespace-only windows are dropped.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"overlap must be non-negative, got {overlap}")
        if overlap >= chunk_size:
            raise ValueError(f"overlap ({overlap}) must be less than chunk_size ({chunk_size})")
        self.chunk_size = chunk_size
        self.overlap = overlap

    def split(self, text: str) -> list[TextSpan]:
        spans: list[TextSpan] = []
        step = self.chunk_size - self.overlap
        start = 0

        while start < len(text):
            end = min(start + self.chunk_size, len(text))
            window = text[start:end]
            if window.strip():
                spans.append(TextSpan(text=window, start_index=start, end_index=end))
            if end == len(text):
                break
            start += step

        return spans

    def chunk(self, document: Document) -> list[TextSpan]:
        return self.split(document.content)
