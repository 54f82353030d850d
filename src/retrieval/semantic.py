"""Semantic retrieval using cosine similarity over stored chunk embeddings.

The query is embedded once; every chunk carrying an embedding of the same
dimensionality is scored by a linear scan. There is no vector index: the
corpus is reloaded for each query.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Union

from src.assistant.document import Chunk, RankedChunk, RankingMethod
from src.assistant.embeddings import EmbeddingProvider
from src.assistant.result import Result
from src.retrieval.corpus import CorpusStore
from src.retrieval.similarity import cosine_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Embedded:
    """The embedding service produced a vector for the query."""

    vector: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class Unavailable:
    """No query vector could be obtained; retrieval must fall back."""

    reason: str


QueryEmbedding = Union[Embedded, Unavailable]


def embed_query(provider: EmbeddingProvider, query: str) -> QueryEmbedding:
    """Ask the provider for a query vector. Never raises."""
    try:
        result = provider.embed_query(query)
    except Exception as e:
        return Unavailable(f"embedding provider raised {type(e).__name__}: {e}")

    if result.is_err():
        return Unavailable(str(result.error))  # type: ignore[union-attr]

    vector = result.unwrap()
    if not vector:
        return Unavailable("embedding provider returned an empty vector")
    values = tuple(float(v) for v in vector)
    if not all(math.isfinite(v) for v in values):
        return Unavailable("embedding provider returned a non-finite vector")
    return Embedded(values)


def validate_ranking_params(top_k: int, similarity_threshold: float = 0.0) -> None:
    if top_k < 1:
        raise ValueError(f"top_k must be at least 1, got {top_k}")
    if not 0.0 <= similarity_threshold <= 1.0:
        raise ValueError(
            f"similarity_threshold must be between 0 and 1, got {similarity_threshold}"
        )


def rank_by_embedding(
    query_vector: Sequence[float],
    chunks: Sequence[Chunk],
    top_k: int = 5,
    similarity_threshold: float = 0.5,
) -> list[RankedChunk]:
    """Rank chunks by cosine similarity to ``query_vector``.

    Chunks without an embedding, or whose embedding length differs from the
    query's, are skipped. Results below ``similarity_threshold`` are dropped.
    Ties keep corpus order since the sort is stable.
    """
    validate_ranking_params(top_k, similarity_threshold)

    dimensions = len(query_vector)
    scored: list[RankedChunk] = []
    skipped = 0

    for chunk in chunks:
        if chunk.embedding is None or len(chunk.embedding) != dimensions:
            skipped += 1
            continue
        similarity = cosine_similarity(query_vector, chunk.embedding)
        if similarity >= similarity_threshold:
            scored.append(
                RankedChunk(chunk=chunk, similarity=similarity, method=RankingMethod.SEMANTIC)
            )

    if skipped:
        logger.debug(
            "Skipped chunks without a usable embedding",
            extra={"skipped": skipped, "dimensions": dimensions},
        )

    scored.sort(key=lambda rc: rc.similarity, reverse=True)
    return scored[:top_k]


class SemanticRetriever:
    """Retrieves chunks from a corpus store by embedding similarity."""

    def __init__(self, store: CorpusStore) -> None:
        self._store = store

    def retrieve(
        self,
        query_vector: Sequence[float],
        top_k: int = 5,
        similarity_threshold: float = 0.5,
    ) -> Result[list[RankedChunk], str]:
        """Load the corpus and rank it against an already-embedded query."""
        validate_ranking_params(top_k, similarity_threshold)
        return self._store.load_all_chunks().map(
            lambda chunks: rank_by_embedding(query_vector, chunks, top_k, similarity_threshold)
        )
