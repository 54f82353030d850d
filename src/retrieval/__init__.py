"""Retrieval: cosine ranking with a keyword fallback over a reloaded corpus."""

from src.retrieval.corpus import CorpusStore, InMemoryCorpusStore, LocalCorpusStore
from src.retrieval.keyword import KeywordRetriever, rank_by_keywords
from src.retrieval.relevance import RelevanceSearch, RetrievalOutcome
from src.retrieval.semantic import SemanticRetriever, rank_by_embedding

__all__ = [
    "CorpusStore",
    "InMemoryCorpusStore",
    "LocalCorpusStore",
    "KeywordRetriever",
    "RelevanceSearch",
    "RetrievalOutcome",
    "SemanticRetriever",
    "rank_by_embedding",
    "rank_by_keywords",
]
