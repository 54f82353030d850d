"""Document models for the troubleshooting assistant.

Defines the data flowing through ingestion, retrieval, and answer
generation. Everything here is immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

MetadataValue = str | int | float | bool


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RankingMethod(str, Enum):
    """Which ranker produced a result."""

    SEMANTIC = "semantic"
    KEYWORD = "keyword"


@dataclass(frozen=True, slots=True)
class Document:
    """A source document (manual, maintenance note) before chunking."""

    content: str
    source: str
    metadata: dict[str, MetadataValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.content.strip():
            raise ValueError("Document content cannot be empty")
        if not self.source.strip():
            raise ValueError("Document source cannot be empty")


@dataclass(frozen=True, slots=True)
class Chunk:
    """A unit of retrievable text, optionally paired with its embedding."""

    text: str
    source: str
    embedding: Optional[tuple[float, ...]] = None
    chunk_id: str = field(default_factory=lambda: str(uuid4()))
    chunk_index: int = 0
    metadata: dict[str, MetadataValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("Chunk text cannot be empty")


@dataclass(frozen=True, slots=True)
class ProcessedDocument:
    """All chunks produced from one source document by ingestion."""

    source: str
    chunks: list[Chunk]
    total_characters: int
    processed_at: str = field(default_factory=_utc_now)
    original_path: str = ""
    metadata: dict[str, MetadataValue] = field(default_factory=dict)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)


@dataclass(frozen=True, slots=True)
class RankedChunk:
    """A chunk returned from ranking together with its relevance score.

    Scores are not range-checked: keyword scores are occurrence counts per
    keyword and may exceed 1.0.
    """

    chunk: Chunk
    similarity: float
    method: RankingMethod

    @property
    def text(self) -> str:
        return self.chunk.text

    @property
    def source(self) -> str:
        return self.chunk.source


@dataclass(frozen=True, slots=True)
class AnswerResult:
    """The final output of a question put to the assistant."""

    answer: str
    question: str
    sources: list[str]
    chunks: list[RankedChunk]
    embedding_used: bool
    chunks_found: int
    top_similarity: float
    model: str
    latency_ms: float
    timestamp: str = field(default_factory=_utc_now)


@dataclass(frozen=True, slots=True)
class SourceSummary:
    name: str
    chunks: int
    characters: int
    processed_at: str


@dataclass(frozen=True, slots=True)
class CorpusStats:
    """Aggregate figures over every processed document in the corpus."""

    total_files: int
    total_chunks: int
    total_characters: int
    sources: list[SourceSummary]
    storage_mode: str
