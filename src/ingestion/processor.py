"""Offline processing of source documents into the retrieval corpus.

Each document is chunked and every chunk is embedded. A chunk whose
embedding fails is still stored, without a vector, so it remains
reachable through keyword search.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from src.assistant.document import Chunk, Document, ProcessedDocument
from src.assistant.embeddings import EmbeddingProvider
from src.assistant.result import Err, Ok, Result
from src.ingestion.chunker import CharacterChunker
from src.retrieval.corpus import InMemoryCorpusStore, LocalCorpusStore

logger = logging.getLogger(__name__)


class DocumentProcessor:
    """Turns a Document into a ProcessedDocument with embedded chunks."""

    def __init__(self, embeddings: EmbeddingProvider, chunker: CharacterChunker) -> None:
        self._embeddings = embeddings
        self._chunker = chunker

    def process(self, document: Document, original_path: str = "") -> ProcessedDocument:
        spans = self._chunker.chunk(document)
        total = len(spans)
        embeddings = self._embed_spans([span.text for span in spans], document.source)

        chunks: list[Chunk] = []
        for index, (span, embedding) in enumerate(zip(spans, embeddings)):
            chunks.append(
                Chunk(
                    text=span.text,
                    source=document.source,
                    embedding=embedding,
                    chunk_id=f"{document.source}_chunk_{index}",
                    chunk_index=index,
                    metadata={
                        **document.metadata,
                        "source": document.source,
                        "chunkIndex": index,
                        "totalChunks": total,
                        "startIndex": span.start_index,
                        "endIndex": span.end_index,
                    },
                )
            )

        logger.info(
            "Processed document",
            extra={"source": document.source, "chunks": total},
        )
        return ProcessedDocument(
            source=document.source,
            chunks=chunks,
            total_characters=len(document.content),
            original_path=original_path,
            metadata={
                "chunkSize": self._chunker.chunk_size,
                "chunkOverlap": self._chunker.overlap,
                "embeddingModel": self._embeddings.model_name,
            },
        )

    def _embed_spans(self, texts: list[str], source: str) -> list[Optional[tuple[float, ...]]]:
        """Embed all chunk texts in one request.

        If the batch fails, or returns the wrong number of vectors, each
        chunk is embedded on its own instead.
        """
        if not texts:
            return []

        batch = self._embeddings.embed_texts(texts)
        if batch.is_ok() and len(batch.unwrap()) == len(texts):
            return [_as_vector(values) for values in batch.unwrap()]

        logger.warning(
            "Batch embedding failed, embedding chunks one at a time",
            extra={
                "source": source,
                "chunks": len(texts),
                "error": (
                    batch.error  # type: ignore[union-attr]
                    if batch.is_err()
                    else f"expected {len(texts)} vectors, got {len(batch.unwrap())}"
                ),
            },
        )

        vectors: list[Optional[tuple[float, ...]]] = []
        for index, text in enumerate(texts):
            single = self._embeddings.embed_texts([text])
            vector = None
            if single.is_ok() and len(single.unwrap()) == 1:
                vector = _as_vector(single.unwrap()[0])
            if vector is None:
                logger.warning(
                    "Embedding failed, storing chunk without a vector",
                    extra={"source": source, "chunk_index": index},
                )
            vectors.append(vector)
        return vectors


def _as_vector(values: list[float]) -> Optional[tuple[float, ...]]:
    return tuple(float(v) for v in values) if values else None


def ingest_files(
    paths: Iterable[Union[str, Path]],
    processor: DocumentProcessor,
    store: Union[LocalCorpusStore, InMemoryCorpusStore],
) -> Result[int, str]:
    """Process text files and add them to ``store``.

    Missing and empty files are skipped with a warning. Returns the number
    of chunks written.
    """
    total_chunks = 0
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            logger.warning("File not found, skipping", extra={"path": str(path)})
            continue

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(f"Failed to read {path}: {e}")
        if not content.strip():
            logger.warning("Empty file, skipping", extra={"path": str(path)})
            continue

        processed = processor.process(
            Document(content=content, source=path.name), original_path=str(path)
        )
        if isinstance(store, LocalCorpusStore):
            saved = store.save_document(processed)
            if saved.is_err():
                return Err(saved.error)  # type: ignore[union-attr]
        else:
            store.add(processed)
        total_chunks += processed.total_chunks

    return Ok(total_chunks)
