"""FastAPI REST API for the troubleshooting assistant.

Provides endpoints for question answering, raw chunk search, corpus
statistics, and health checks. Supports both production and mock modes.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Literal, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from src.assistant.config import AssistantConfig
from src.assistant.document import MetadataValue, RankedChunk
from src.assistant.logger import setup_logging
from src.assistant.pipeline import TroubleshootingAssistant
from src.assistant.result import Result

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

T = TypeVar("T")


# --- Request/Response Models ---


class SearchRequest(BaseModel):
    """Request body for ranking chunks without generating an answer."""

    query: str = Field(..., min_length=1, description="Free-text search query")
    top_k: int = Field(default=5, ge=1, le=50, description="Maximum chunks returned")
    similarity_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Minimum cosine similarity"
    )


class QueryRequest(BaseModel):
    """Request body for asking the assistant a question."""

    question: str = Field(..., min_length=1, description="The question to answer")
    top_k: int = Field(default=5, ge=1, le=50, description="Number of chunks")
    similarity_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Minimum cosine similarity"
    )
    include_context: bool = Field(default=True, description="Return retrieved chunks")
    language: Optional[Literal["ja", "en"]] = Field(default=None, description="Answer language")


class ChunkInfo(BaseModel):
    """A ranked chunk as returned to clients."""

    text: str
    source: str
    similarity: float
    method: str
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    success: bool = True
    query: str
    chunks: list[ChunkInfo]
    count: int
    embedding_used: bool
    timestamp: str


class QueryMetadata(BaseModel):
    query_embedding_generated: bool
    chunks_found: int
    top_similarity: float
    model: str
    latency_ms: float


class QueryResponse(BaseModel):
    success: bool = True
    question: str
    answer: str
    sources: list[str]
    chunks: list[ChunkInfo]
    metadata: QueryMetadata
    timestamp: str


class SourceInfo(BaseModel):
    name: str
    chunks: int
    characters: int
    processed_at: str


class StatsResponse(BaseModel):
    success: bool = True
    total_files: int
    total_chunks: int
    total_characters: int
    sources: list[SourceInfo]
    storage_mode: str
    timestamp: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    mode: str
    storage_mode: str
    version: str = VERSION


# --- Helpers ---


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chunk_info(rc: RankedChunk) -> ChunkInfo:
    return ChunkInfo(
        text=rc.text,
        source=rc.source,
        similarity=rc.similarity,
        method=rc.method.value,
        metadata=dict(rc.chunk.metadata),
    )


def get_assistant(request: Request) -> TroubleshootingAssistant:
    return request.app.state.assistant


async def _run_bounded(fn: Callable[..., Result[T, str]], *args: Any, timeout: float) -> T:
    """Run a blocking assistant call off the event loop under a deadline.

    Err results become HTTP 500, an exceeded deadline becomes HTTP 504.
    """
    try:
        result = await asyncio.wait_for(run_in_threadpool(fn, *args), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Request timed out", extra={"timeout_s": timeout})
        raise HTTPException(status_code=504, detail=f"Timed out after {timeout}s")

    if result.is_err():
        logger.error("Request failed", extra={"error": result.error})  # type: ignore[union-attr]
        raise HTTPException(status_code=500, detail=str(result.error))  # type: ignore[union-attr]
    return result.unwrap()


# --- Application ---


def create_app(
    config: Optional[AssistantConfig] = None,
    assistant: Optional[TroubleshootingAssistant] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional AssistantConfig. Defaults to environment-based config.
        assistant: Prebuilt assistant, mainly for tests. Built from config otherwise.
    """
    if assistant is None:
        assistant = TroubleshootingAssistant(config or AssistantConfig())
    cfg = assistant.config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        setup_logging(cfg.log_level, cfg.log_json)
        logger.info(
            "Assistant API starting",
            extra={"mode": cfg.mode.value, "storage_mode": assistant.store.storage_mode},
        )
        yield

    app = FastAPI(
        title="Troubleshooting Assistant",
        description="Knowledge-base retrieval and answers for equipment troubleshooting",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.assistant = assistant

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        """Health check endpoint."""
        current = get_assistant(request)
        return HealthResponse(
            status="healthy",
            mode=current.config.mode.value,
            storage_mode=current.store.storage_mode,
        )

    @app.post("/rag/search", response_model=SearchResponse)
    async def search(body: SearchRequest, request: Request) -> SearchResponse:
        """Rank knowledge-base chunks for a query."""
        current = get_assistant(request)
        outcome = await _run_bounded(
            current.search,
            body.query,
            body.top_k,
            body.similarity_threshold,
            timeout=current.config.request_timeout,
        )
        return SearchResponse(
            query=body.query,
            chunks=[_chunk_info(rc) for rc in outcome.chunks],
            count=len(outcome.chunks),
            embedding_used=outcome.embedding_used,
            timestamp=_now(),
        )

    @app.post("/rag/query", response_model=QueryResponse)
    async def query(body: QueryRequest, request: Request) -> QueryResponse:
        """Answer a troubleshooting question from the knowledge base."""
        current = get_assistant(request)
        answer = await _run_bounded(
            current.ask,
            body.question,
            body.top_k,
            body.similarity_threshold,
            body.include_context,
            body.language,
            timeout=current.config.request_timeout,
        )
        return QueryResponse(
            question=answer.question,
            answer=answer.answer,
            sources=answer.sources,
            chunks=[_chunk_info(rc) for rc in answer.chunks],
            metadata=QueryMetadata(
                query_embedding_generated=answer.embedding_used,
                chunks_found=answer.chunks_found,
                top_similarity=answer.top_similarity,
                model=answer.model,
                latency_ms=answer.latency_ms,
            ),
            timestamp=answer.timestamp,
        )

    @app.get("/rag/stats", response_model=StatsResponse)
    async def stats(request: Request) -> StatsResponse:
        """Summarize the processed documents in the corpus."""
        current = get_assistant(request)
        corpus_stats = await _run_bounded(
            current.stats, timeout=current.config.request_timeout
        )
        return StatsResponse(
            total_files=corpus_stats.total_files,
            total_chunks=corpus_stats.total_chunks,
            total_characters=corpus_stats.total_characters,
            sources=[
                SourceInfo(
                    name=s.name,
                    chunks=s.chunks,
                    characters=s.characters,
                    processed_at=s.processed_at,
                )
                for s in corpus_stats.sources
            ],
            storage_mode=corpus_stats.storage_mode,
            timestamp=_now(),
        )

    return app


# Default app instance for uvicorn
app = create_app()
