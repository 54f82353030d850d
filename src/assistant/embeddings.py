"""Embedding providers for manual chunks and operator questions.

``OpenAIEmbeddingProvider`` calls the hosted model once per request with no
retry, so a slow or failing endpoint surfaces quickly and retrieval can
switch to keyword ranking. ``MockEmbeddingProvider`` needs no API key and
is used by the demo and the tests.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np

from src.assistant.config import AssistantConfig, RunMode
from src.assistant.result import Err, Ok, Result


class EmbeddingProvider(ABC):
    """Turns text into vectors comparable by cosine similarity."""

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        """Vectors for chunk texts, in input order."""
        ...

    @abstractmethod
    def embed_query(self, query: str) -> Result[list[float], str]:
        """Vector for an operator question."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        ...

    @property
    def model_name(self) -> str:
        """Name recorded alongside stored embeddings."""
        return self.__class__.__name__


class MockEmbeddingProvider(EmbeddingProvider):
    """Hash-seeded vectors, stable across runs.

    Each word contributes a fixed random direction, so texts that share
    words ("hydraulic filter", "replace the hydraulic filter") land close
    together and mock-mode retrieval still ranks sensibly.
    """

    def __init__(self, dimensions: int = 384) -> None:
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return f"mock-{self._dimensions}"

    def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        try:
            return Ok([self._vector_for(text) for text in texts])
        except Exception as e:
            return Err(f"Mock chunk embedding failed: {e}")

    def embed_query(self, query: str) -> Result[list[float], str]:
        try:
            return Ok(self._vector_for(query))
        except Exception as e:
            return Err(f"Mock question embedding failed: {e}")

    def _seeded_direction(self, token: str, algorithm: str) -> np.ndarray:
        digest = hashlib.new(algorithm, token.encode("utf-8")).hexdigest()
        return np.random.RandomState(int(digest[:8], 16)).randn(self._dimensions)

    def _vector_for(self, text: str) -> list[float]:
        # Small whole-text component keeps distinct texts apart
        vector = self._seeded_direction(text, "sha256") * 0.2
        for word in sorted(set(text.lower().split())):
            vector = vector + self._seeded_direction(word, "md5")

        magnitude = np.linalg.norm(vector)
        if magnitude > 0:
            vector = vector / magnitude
        return vector.astype(np.float64).tolist()


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Hosted OpenAI embeddings through ``langchain_openai``."""

    def __init__(self, config: AssistantConfig) -> None:
        self._config = config
        self._client: Optional[Any] = None

    @property
    def dimensions(self) -> int:
        return self._config.embedding_dimensions

    @property
    def model_name(self) -> str:
        return self._config.embedding_model

    def _embeddings_model(self) -> Any:
        if self._client is None:
            from langchain_openai import OpenAIEmbeddings

            self._client = OpenAIEmbeddings(
                model=self._config.embedding_model,
                dimensions=self._config.embedding_dimensions,
                openai_api_key=self._config.openai_api_key,
                timeout=self._config.request_timeout,
                max_retries=0,
            )
        return self._client

    def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        try:
            return Ok(self._embeddings_model().embed_documents(texts))
        except ImportError:
            return Err("langchain-openai is not installed")
        except Exception as e:
            return Err(f"Embedding request for {len(texts)} chunks failed: {e}")

    def embed_query(self, query: str) -> Result[list[float], str]:
        try:
            return Ok(self._embeddings_model().embed_query(query))
        except ImportError:
            return Err("langchain-openai is not installed")
        except Exception as e:
            return Err(f"Question embedding request failed: {e}")


def create_embedding_provider(config: AssistantConfig) -> EmbeddingProvider:
    """Mock vectors in mock mode; hosted embeddings in production and hybrid."""
    if config.mode == RunMode.MOCK:
        return MockEmbeddingProvider(dimensions=config.embedding_dimensions)
    return OpenAIEmbeddingProvider(config)
