"""Configuration management for the troubleshooting assistant.

Supports three modes:
- Production: Real LLM and embedding APIs
- Mock: Deterministic fake responses for demos and testing
- Hybrid: Real embeddings with mock LLM (cost-effective testing)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class RunMode(str, Enum):
    """Assistant execution mode."""

    PRODUCTION = "production"
    MOCK = "mock"
    HYBRID = "hybrid"


class AssistantConfig(BaseSettings):
    """Main assistant configuration.

    All settings can be overridden via environment variables with the
    ASSISTANT_ prefix. Example: ASSISTANT_MODE=production,
    ASSISTANT_OPENAI_API_KEY=sk-...
    """

    model_config = {"env_prefix": "ASSISTANT_"}

    # Core mode
    mode: RunMode = Field(default=RunMode.MOCK, description="Execution mode")

    # LLM settings
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    llm_model: str = Field(default="gpt-4o-mini", description="LLM model name")
    llm_temperature: float = Field(default=0.1, description="LLM temperature")
    llm_max_tokens: int = Field(default=1024, description="Max tokens for LLM response")

    # Embedding settings
    embedding_model: str = Field(
        default="text-embedding-3-small", description="Embedding model name"
    )
    embedding_dimensions: int = Field(default=384, description="Embedding vector dimensions")

    # Upper bound in seconds for a single model call and for a whole API request
    request_timeout: float = Field(default=30.0, gt=0, description="Request timeout (s)")

    # Knowledge base layout
    knowledge_base_dir: str = Field(
        default="knowledge-base", description="Root of the knowledge base"
    )
    processed_subdir: str = Field(
        default="processed", description="Folder holding *_rag.json files"
    )

    # Ingestion settings (characters, not tokens)
    chunk_size: int = Field(default=1000, description="Chunk size in characters")
    chunk_overlap: int = Field(default=200, description="Overlap between chunks")

    # Retrieval settings
    top_k: int = Field(default=5, ge=1, description="Number of chunks to retrieve")
    similarity_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Minimum cosine similarity"
    )

    # Answer settings
    language: Literal["ja", "en"] = Field(default="ja", description="Answer language")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    @property
    def processed_dir(self) -> Path:
        """Directory the corpus store reads from and ingestion writes to."""
        return Path(self.knowledge_base_dir) / self.processed_subdir


class MockConfig:
    """Configuration presets for mock/demo mode.

    Returns deterministic responses without requiring any API keys.
    Useful for testing, demos, and CI/CD pipelines.
    """

    @staticmethod
    def default() -> AssistantConfig:
        """Create a default mock configuration."""
        return AssistantConfig(mode=RunMode.MOCK)

    @staticmethod
    def with_overrides(**kwargs: object) -> AssistantConfig:
        """Create mock config with specific overrides."""
        defaults = {"mode": RunMode.MOCK}
        defaults.update(kwargs)
        return AssistantConfig(**defaults)  # type: ignore[arg-type]
