"""Ingestion: chunk and embed source documents into the retrieval corpus."""

from src.ingestion.chunker import CharacterChunker, TextSpan
from src.ingestion.processor import DocumentProcessor, ingest_files

__all__ = ["CharacterChunker", "TextSpan", "DocumentProcessor", "ingest_files"]
