"""Integration tests for the FastAPI REST API."""

import time

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.assistant.config import MockConfig
from src.assistant.document import Chunk, ProcessedDocument
from src.assistant.embeddings import EmbeddingProvider
from src.assistant.llm import MockLLMProvider
from src.assistant.pipeline import TroubleshootingAssistant
from src.assistant.result import Err, Ok, Result
from src.retrieval.corpus import CorpusStore, InMemoryCorpusStore


class AxisEmbeddingProvider(EmbeddingProvider):
    """Embeds queries mentioning "pump" on one axis, everything else on the other."""

    @property
    def dimensions(self) -> int:
        return 2

    def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        return Ok([self._vector(t) for t in texts])

    def embed_query(self, query: str) -> Result[list[float], str]:
        if "offline" in query:
            return Err("embedding service offline")
        return Ok(self._vector(query))

    @staticmethod
    def _vector(text: str) -> list[float]:
        return [1.0, 0.0] if "pump" in text.lower() else [0.0, 1.0]


class SlowStore(CorpusStore):
    @property
    def storage_mode(self) -> str:
        return "local"

    def load_documents(self) -> Result[list[ProcessedDocument], str]:
        time.sleep(0.5)
        return Ok([])


class FailingStore(CorpusStore):
    @property
    def storage_mode(self) -> str:
        return "local"

    def load_documents(self) -> Result[list[ProcessedDocument], str]:
        return Err("Corpus directory not found: /srv/kb/processed")


def sample_store() -> InMemoryCorpusStore:
    return InMemoryCorpusStore(
        [
            ProcessedDocument(
                source="pump-manual.txt",
                chunks=[
                    Chunk(
                        text="Pump cavitation: check the suction strainer.",
                        source="pump-manual.txt",
                        embedding=(1.0, 0.0),
                        metadata={"chunkIndex": 0, "startIndex": 0, "endIndex": 44},
                    )
                ],
                total_characters=44,
                processed_at="2026-01-01T00:00:00+00:00",
            ),
            ProcessedDocument(
                source="belt-notes.txt",
                chunks=[Chunk(text="Belt slips under load.", source="belt-notes.txt", embedding=(0.0, 1.0))],
                total_characters=22,
                processed_at="2026-01-02T00:00:00+00:00",
            ),
        ]
    )


def make_client(store: CorpusStore, **overrides: object) -> TestClient:
    assistant = TroubleshootingAssistant(
        MockConfig.with_overrides(**overrides),
        embedding_provider=AxisEmbeddingProvider(),
        llm_provider=MockLLMProvider(),
        store=store,
    )
    return TestClient(create_app(assistant=assistant))


@pytest.fixture
def client() -> TestClient:
    return make_client(sample_store())


class TestHealthEndpoint:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "mock"
        assert data["storage_mode"] == "memory"
        assert "version" in data


class TestSearchEndpoint:
    def test_semantic_search(self, client: TestClient) -> None:
        response = client.post("/rag/search", json={"query": "pump noise", "top_k": 3})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["embedding_used"] is True
        assert data["count"] == 1
        chunk = data["chunks"][0]
        assert chunk["source"] == "pump-manual.txt"
        assert chunk["method"] == "semantic"
        assert chunk["similarity"] == pytest.approx(1.0)
        assert chunk["metadata"]["endIndex"] == 44

    def test_keyword_fallback(self, client: TestClient) -> None:
        response = client.post("/rag/search", json={"query": "belt offline"})
        data = response.json()
        assert data["embedding_used"] is False
        assert [c["source"] for c in data["chunks"]] == ["belt-notes.txt"]
        assert data["chunks"][0]["method"] == "keyword"

    def test_empty_query_rejected(self, client: TestClient) -> None:
        assert client.post("/rag/search", json={"query": ""}).status_code == 422

    def test_invalid_top_k_rejected(self, client: TestClient) -> None:
        assert client.post("/rag/search", json={"query": "pump", "top_k": 0}).status_code == 422

    def test_invalid_threshold_rejected(self, client: TestClient) -> None:
        response = client.post("/rag/search", json={"query": "pump", "similarity_threshold": 2})
        assert response.status_code == 422


class TestQueryEndpoint:
    def test_query(self, client: TestClient) -> None:
        response = client.post("/rag/query", json={"question": "pump cavitation", "language": "en"})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["question"] == "pump cavitation"
        assert "suction strainer" in data["answer"]
        assert data["sources"] == ["pump-manual.txt"]
        assert data["metadata"]["query_embedding_generated"] is True
        assert data["metadata"]["chunks_found"] == 1
        assert data["metadata"]["model"] == "mock"

    def test_query_without_context(self, client: TestClient) -> None:
        response = client.post("/rag/query", json={"question": "pump", "include_context": False})
        data = response.json()
        assert data["chunks"] == []
        assert data["sources"] == ["pump-manual.txt"]

    def test_no_results(self, client: TestClient) -> None:
        response = client.post(
            "/rag/query", json={"question": "gearbox offline", "language": "ja"}
        )
        data = response.json()
        assert data["metadata"]["chunks_found"] == 0
        assert data["metadata"]["model"] == "none"
        assert "見つかりませんでした" in data["answer"]

    def test_unsupported_language_rejected(self, client: TestClient) -> None:
        response = client.post("/rag/query", json={"question": "pump", "language": "fr"})
        assert response.status_code == 422


class TestStatsEndpoint:
    def test_stats(self, client: TestClient) -> None:
        response = client.get("/rag/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["total_files"] == 2
        assert data["total_chunks"] == 2
        assert data["total_characters"] == 66
        assert data["storage_mode"] == "memory"
        assert data["sources"][0]["name"] == "pump-manual.txt"


class TestFailures:
    def test_corpus_failure_is_500(self) -> None:
        client = make_client(FailingStore())
        response = client.post("/rag/search", json={"query": "pump"})
        assert response.status_code == 500
        assert "not found" in response.json()["detail"]

    def test_stats_failure_is_500(self) -> None:
        assert make_client(FailingStore()).get("/rag/stats").status_code == 500

    def test_timeout_is_504(self) -> None:
        client = make_client(SlowStore(), request_timeout=0.05)
        response = client.post("/rag/query", json={"question": "pump"})
        assert response.status_code == 504
