"""Keyword retrieval used when no query embedding is available.

Scores chunks by literal substring counts of the query's keywords.
Matching is unanchored: "oil" also counts inside "foil" or "boiler".
"""

from __future__ import annotations

from typing import Sequence

from src.assistant.document import Chunk, RankedChunk, RankingMethod
from src.assistant.result import Result
from src.retrieval.corpus import CorpusStore
from src.retrieval.semantic import validate_ranking_params


def extract_keywords(query: str) -> list[str]:
    """Lowercased whitespace tokens of ``query``, de-duplicated in order."""
    return list(dict.fromkeys(query.lower().split()))


def rank_by_keywords(
    query: str, chunks: Sequence[Chunk], top_k: int = 5
) -> list[RankedChunk]:
    """Rank chunks by keyword occurrences normalized by keyword count.

    A keyword occurring three times in a chunk contributes 3. Chunks with
    no match at all are dropped; no threshold is applied otherwise.
    """
    validate_ranking_params(top_k)

    keywords = extract_keywords(query)
    if not keywords:
        return []

    scored: list[RankedChunk] = []
    for chunk in chunks:
        text = chunk.text.lower()
        raw_score = sum(text.count(keyword) for keyword in keywords)
        if raw_score > 0:
            scored.append(
                RankedChunk(
                    chunk=chunk,
                    similarity=raw_score / len(keywords),
                    method=RankingMethod.KEYWORD,
                )
            )

    scored.sort(key=lambda rc: rc.similarity, reverse=True)
    return scored[:top_k]


class KeywordRetriever:
    """Retrieves chunks from a corpus store by keyword overlap."""

    def __init__(self, store: CorpusStore) -> None:
        self._store = store

    def retrieve(self, query: str, top_k: int = 5) -> Result[list[RankedChunk], str]:
        """Load the corpus and rank it by keyword occurrences."""
        validate_ranking_params(top_k)
        return self._store.load_all_chunks().map(
            lambda chunks: rank_by_keywords(query, chunks, top_k)
        )
