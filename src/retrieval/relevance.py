"""Single entry point for finding chunks relevant to a query.

Each call runs one of two paths:

    EmbeddingAttempt --Embedded----> semantic ranking
    EmbeddingAttempt --Unavailable-> keyword ranking

The embedding request is made exactly once per call, then the corpus is
loaded. An unavailable embedding only changes the path; a corpus that
cannot be loaded is the one failure returned to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.assistant.document import RankedChunk
from src.assistant.embeddings import EmbeddingProvider
from src.assistant.result import Result
from src.retrieval.corpus import CorpusStore
from src.retrieval.keyword import KeywordRetriever
from src.retrieval.semantic import (
    SemanticRetriever,
    Unavailable,
    embed_query,
    validate_ranking_params,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetrievalOutcome:
    """Ranked chunks plus which path produced them."""

    chunks: list[RankedChunk]
    embedding_used: bool
    fallback_reason: Optional[str] = None


class RelevanceSearch:
    """Ranks corpus chunks against a query, falling back to keywords.

    Holds no per-query state, so one instance may serve concurrent calls.
    """

    def __init__(self, embeddings: EmbeddingProvider, store: CorpusStore) -> None:
        self._embeddings = embeddings
        self._semantic = SemanticRetriever(store)
        self._keyword = KeywordRetriever(store)

    def search(
        self,
        query: str,
        top_k: int = 5,
        similarity_threshold: float = 0.5,
    ) -> Result[RetrievalOutcome, str]:
        """Rank chunks for ``query`` and report whether embeddings were used."""
        validate_ranking_params(top_k, similarity_threshold)

        query_embedding = embed_query(self._embeddings, query)

        if isinstance(query_embedding, Unavailable):
            logger.warning(
                "Query embedding unavailable, using keyword search",
                extra={"reason": query_embedding.reason},
            )
            reason = query_embedding.reason
            outcome = self._keyword.retrieve(query, top_k=top_k).map(
                lambda chunks: RetrievalOutcome(
                    chunks, embedding_used=False, fallback_reason=reason
                )
            )
        else:
            outcome = self._semantic.retrieve(
                query_embedding.vector, top_k=top_k, similarity_threshold=similarity_threshold
            ).map(lambda chunks: RetrievalOutcome(chunks, embedding_used=True))

        if outcome.is_err():
            logger.error("Corpus load failed", extra={"error": outcome.error})  # type: ignore[union-attr]
        return outcome

    def find_relevant_chunks(
        self,
        query: str,
        top_k: int = 5,
        similarity_threshold: float = 0.5,
    ) -> Result[list[RankedChunk], str]:
        """Return at most ``top_k`` chunks ordered by descending similarity."""
        return self.search(query, top_k, similarity_threshold).map(
            lambda outcome: outcome.chunks
        )
