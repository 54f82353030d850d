"""Troubleshooting assistant answering questions from the knowledge base.

The assistant is the primary entry point for callers. It:
1. Retrieves relevant manual chunks for a question
2. Assembles them into a prompt
3. Asks the language model for an answer grounded in those chunks

All external dependencies are injected, enabling mock mode
for demos and testing without API keys.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from src.assistant.config import AssistantConfig
from src.assistant.document import AnswerResult, CorpusStats, SourceSummary
from src.assistant.embeddings import EmbeddingProvider, create_embedding_provider
from src.assistant.llm import LLMProvider, build_prompt, create_llm_provider
from src.assistant.result import Err, Ok, Result
from src.retrieval.corpus import CorpusStore, LocalCorpusStore
from src.retrieval.relevance import RelevanceSearch, RetrievalOutcome

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWERS = {
    "ja": "申し訳ございません。関連する情報が見つかりませんでした。",
    "en": "Sorry, no relevant information was found in the reference material.",
}


class TroubleshootingAssistant:
    """Retrieval-backed troubleshooting assistant with pluggable components.

    Usage:
        config = AssistantConfig(mode=RunMode.MOCK)
        assistant = TroubleshootingAssistant(config)

        result = assistant.ask("The hydraulic pressure drops after start-up")
    """

    def __init__(
        self,
        config: Optional[AssistantConfig] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        llm_provider: Optional[LLMProvider] = None,
        store: Optional[CorpusStore] = None,
    ) -> None:
        self._config = config or AssistantConfig()

        # Dependency injection with sensible defaults
        self._embeddings = embedding_provider or create_embedding_provider(self._config)
        self._llm = llm_provider or create_llm_provider(self._config)
        self._store = store or LocalCorpusStore(self._config.processed_dir)

        self._search = RelevanceSearch(self._embeddings, self._store)

    @property
    def config(self) -> AssistantConfig:
        return self._config

    @property
    def store(self) -> CorpusStore:
        return self._store

    def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> Result[RetrievalOutcome, str]:
        """Rank knowledge-base chunks for a query without calling the model."""
        return self._search.search(
            query,
            top_k=self._config.top_k if top_k is None else top_k,
            similarity_threshold=(
                self._config.similarity_threshold
                if similarity_threshold is None
                else similarity_threshold
            ),
        )

    def ask(
        self,
        question: str,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
        include_context: bool = True,
        language: Optional[str] = None,
    ) -> Result[AnswerResult, str]:
        """Answer a question using the most relevant reference chunks.

        Args:
            question: The operator's question or symptom description
            top_k: Override number of chunks to retrieve
            similarity_threshold: Override the minimum cosine similarity
            include_context: Return the ranked chunks alongside the answer
            language: "ja" or "en"; defaults to the configured language

        Returns:
            Result with AnswerResult or error message.
        """
        start_time = time.monotonic()
        lang = language or self._config.language
        logger.info("Processing question", extra={"question": question[:200]})

        retrieval = self.search(question, top_k, similarity_threshold)
        if retrieval.is_err():
            return Err(f"Retrieval failed: {retrieval.error}")  # type: ignore[union-attr]

        outcome = retrieval.unwrap()
        chunks = outcome.chunks
        logger.info("Found relevant chunks", extra={"chunks_found": len(chunks)})

        if not chunks:
            answer = NO_RESULTS_ANSWERS.get(lang, NO_RESULTS_ANSWERS["en"])
            model = "none"
        else:
            gen_result = self._llm.generate(build_prompt(question, chunks, lang))
            if gen_result.is_err():
                return Err(f"Generation failed: {gen_result.error}")  # type: ignore[union-attr]
            answer = gen_result.unwrap()
            model = self._llm.model_name

        elapsed_ms = (time.monotonic() - start_time) * 1000
        return Ok(
            AnswerResult(
                answer=answer,
                question=question,
                sources=list(dict.fromkeys(rc.source for rc in chunks)),
                chunks=chunks if include_context else [],
                embedding_used=outcome.embedding_used,
                chunks_found=len(chunks),
                top_similarity=chunks[0].similarity if chunks else 0.0,
                model=model,
                latency_ms=elapsed_ms,
            )
        )

    def stats(self) -> Result[CorpusStats, str]:
        """Summarize the processed documents currently in the corpus."""
        loaded = self._store.load_documents()
        if loaded.is_err():
            return Err(f"Corpus load failed: {loaded.error}")  # type: ignore[union-attr]

        documents = loaded.unwrap()
        return Ok(
            CorpusStats(
                total_files=len(documents),
                total_chunks=sum(doc.total_chunks for doc in documents),
                total_characters=sum(doc.total_characters for doc in documents),
                sources=[
                    SourceSummary(
                        name=doc.source,
                        chunks=doc.total_chunks,
                        characters=doc.total_characters,
                        processed_at=doc.processed_at,
                    )
                    for doc in documents
                ],
                storage_mode=self._store.storage_mode,
            )
        )
