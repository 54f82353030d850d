"""Corpus stores supplying chunks to the rankers.

The corpus is materialized fresh on every call; nothing is cached between
queries. Processed documents are kept as ``<name>_rag.json`` files, the
layout written by ingestion:

    {
      "source": "pump-manual.txt",
      "originalPath": "...",
      "totalChunks": 2,
      "totalCharacters": 1800,
      "processedAt": "2026-01-01T00:00:00+00:00",
      "chunks": [
        {"id": "...", "text": "...", "startIndex": 0, "endIndex": 1000,
         "embedding": [0.1, ...] | null, "metadata": {...}}
      ],
      "metadata": {"chunkSize": 1000, "chunkOverlap": 200, "embeddingModel": "..."}
    }
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

from src.assistant.document import Chunk, MetadataValue, ProcessedDocument
from src.assistant.result import Err, Ok, Result

logger = logging.getLogger(__name__)

RAG_FILE_SUFFIX = "_rag.json"


class CorpusStore(ABC):
    """Source of processed documents for retrieval."""

    @abstractmethod
    def load_documents(self) -> Result[list[ProcessedDocument], str]:
        """Load every processed document currently in the store."""
        ...

    @property
    @abstractmethod
    def storage_mode(self) -> str:
        ...

    def load_all_chunks(self) -> Result[list[Chunk], str]:
        """Flatten the corpus in document order, then chunk order."""
        return self.load_documents().map(
            lambda documents: [chunk for doc in documents for chunk in doc.chunks]
        )


class InMemoryCorpusStore(CorpusStore):
    """Corpus held in process memory, for demos and tests."""

    def __init__(self, documents: Optional[list[ProcessedDocument]] = None) -> None:
        self._documents: list[ProcessedDocument] = list(documents or [])

    @property
    def storage_mode(self) -> str:
        return "memory"

    def add(self, document: ProcessedDocument) -> None:
        self._documents.append(document)

    def load_documents(self) -> Result[list[ProcessedDocument], str]:
        return Ok(list(self._documents))


class LocalCorpusStore(CorpusStore):
    """Corpus stored as ``*_rag.json`` files in a local directory."""

    def __init__(self, processed_dir: Union[str, Path]) -> None:
        self._dir = Path(processed_dir)

    @property
    def storage_mode(self) -> str:
        return "local"

    @property
    def directory(self) -> Path:
        return self._dir

    def load_documents(self) -> Result[list[ProcessedDocument], str]:
        if not self._dir.is_dir():
            return Err(f"Corpus directory not found: {self._dir}")

        try:
            paths = sorted(self._dir.glob(f"*{RAG_FILE_SUFFIX}"))
        except OSError as e:
            return Err(f"Failed to list corpus directory {self._dir}: {e}")

        documents: list[ProcessedDocument] = []
        for path in paths:
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                return Err(f"Failed to read {path.name}: {e}")
            if not isinstance(raw, dict):
                return Err(f"Failed to read {path.name}: top-level value is not an object")
            documents.append(_parse_document(raw, fallback_source=path.name))

        logger.debug(
            "Loaded corpus",
            extra={"directory": str(self._dir), "documents": len(documents)},
        )
        return Ok(documents)

    def save_document(self, document: ProcessedDocument) -> Result[Path, str]:
        """Write a processed document as ``<source stem>_rag.json``."""
        path = self._dir / f"{Path(document.source).stem}{RAG_FILE_SUFFIX}"
        if path.exists():
            logger.warning(
                "Overwriting existing processed file",
                extra={"path": str(path), "source": document.source},
            )
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(_serialize_document(document), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            return Err(f"Failed to write {path}: {e}")
        return Ok(path)


def _parse_document(raw: dict[str, Any], fallback_source: str) -> ProcessedDocument:
    source = str(raw.get("source") or fallback_source)
    raw_chunks = raw.get("chunks")
    if not isinstance(raw_chunks, list):
        raw_chunks = []

    chunks: list[Chunk] = []
    skipped = 0
    for index, raw_chunk in enumerate(raw_chunks):
        chunk = _parse_chunk(raw_chunk, source, index)
        if chunk is None:
            skipped += 1
        else:
            chunks.append(chunk)

    if skipped:
        logger.debug(
            "Skipped malformed chunk records",
            extra={"source": source, "skipped": skipped},
        )

    total_characters = raw.get("totalCharacters")
    if not isinstance(total_characters, int):
        total_characters = sum(len(c.text) for c in chunks)

    return ProcessedDocument(
        source=source,
        chunks=chunks,
        total_characters=total_characters,
        processed_at=str(raw.get("processedAt", "")),
        original_path=str(raw.get("originalPath", "")),
        metadata=_flat_metadata(raw.get("metadata")),
    )


def _parse_chunk(raw: Any, source: str, index: int) -> Optional[Chunk]:
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        return None

    metadata = _flat_metadata(raw.get("metadata"))
    for key in ("startIndex", "endIndex"):
        if isinstance(raw.get(key), int):
            metadata[key] = raw[key]

    chunk_index = metadata.get("chunkIndex", index)
    return Chunk(
        text=text,
        source=source,
        embedding=_parse_embedding(raw.get("embedding")),
        chunk_id=str(raw.get("id") or f"{source}_chunk_{index}"),
        chunk_index=chunk_index if isinstance(chunk_index, int) else index,
        metadata=metadata,
    )


def _parse_embedding(raw: Any) -> Optional[tuple[float, ...]]:
    if not isinstance(raw, list) or not raw:
        return None
    if not all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in raw
    ):
        return None
    return tuple(float(v) for v in raw)


def _flat_metadata(raw: Any) -> dict[str, MetadataValue]:
    if not isinstance(raw, dict):
        return {}
    return {
        str(k): v
        for k, v in raw.items()
        if isinstance(v, (str, int, float, bool))
    }


def _serialize_document(document: ProcessedDocument) -> dict[str, Any]:
    return {
        "source": document.source,
        "originalPath": document.original_path,
        "totalChunks": document.total_chunks,
        "totalCharacters": document.total_characters,
        "processedAt": document.processed_at,
        "chunks": [
            {
                "id": chunk.chunk_id,
                "text": chunk.text,
                "startIndex": chunk.metadata.get("startIndex"),
                "endIndex": chunk.metadata.get("endIndex"),
                "embedding": list(chunk.embedding) if chunk.embedding is not None else None,
                "metadata": {
                    k: v
                    for k, v in chunk.metadata.items()
                    if k not in ("startIndex", "endIndex")
                },
            }
            for chunk in document.chunks
        ],
        "metadata": dict(document.metadata),
    }
