"""Tests for document models."""

import dataclasses

import pytest
from hypothesis import given, strategies as st

from src.assistant.document import (
    Chunk,
    Document,
    ProcessedDocument,
    RankedChunk,
    RankingMethod,
)


class TestDocument:
    def test_create_document(self) -> None:
        doc = Document(content="Pump loses prime", source="pump.txt")
        assert doc.content == "Pump loses prime"
        assert doc.source == "pump.txt"
        assert doc.metadata == {}

    def test_empty_content_raises(self) -> None:
        with pytest.raises(ValueError, match="content cannot be empty"):
            Document(content="", source="pump.txt")

    def test_whitespace_content_raises(self) -> None:
        with pytest.raises(ValueError, match="content cannot be empty"):
            Document(content="   ", source="pump.txt")

    def test_empty_source_raises(self) -> None:
        with pytest.raises(ValueError, match="source cannot be empty"):
            Document(content="Pump loses prime", source="")

    @given(st.text(min_size=1, max_size=100).filter(lambda x: x.strip()))
    def test_valid_content_accepted(self, content: str) -> None:
        assert Document(content=content, source="manual.txt").content == content


class TestChunk:
    def test_defaults(self) -> None:
        chunk = Chunk(text="Check belt tension", source="conveyor.txt")
        assert chunk.embedding is None
        assert chunk.chunk_index == 0
        assert chunk.chunk_id

    def test_empty_text_raises(self) -> None:
        with pytest.raises(ValueError, match="text cannot be empty"):
            Chunk(text=" ", source="conveyor.txt")

    def test_immutable(self) -> None:
        chunk = Chunk(text="Check belt tension", source="conveyor.txt")
        with pytest.raises(dataclasses.FrozenInstanceError):
            chunk.text = "changed"  # type: ignore[misc]


class TestRankedChunk:
    def test_exposes_chunk_fields(self) -> None:
        chunk = Chunk(text="Bleed the brake line", source="brakes.txt")
        ranked = RankedChunk(chunk=chunk, similarity=0.8, method=RankingMethod.SEMANTIC)
        assert ranked.text == "Bleed the brake line"
        assert ranked.source == "brakes.txt"

    def test_keyword_score_may_exceed_one(self) -> None:
        chunk = Chunk(text="oil oil oil", source="engine.txt")
        ranked = RankedChunk(chunk=chunk, similarity=3.0, method=RankingMethod.KEYWORD)
        assert ranked.similarity == 3.0

    def test_method_values(self) -> None:
        assert RankingMethod.SEMANTIC.value == "semantic"
        assert RankingMethod.KEYWORD.value == "keyword"


class TestProcessedDocument:
    def test_total_chunks(self) -> None:
        chunks = [Chunk(text=f"part {i}", source="manual.txt", chunk_index=i) for i in range(3)]
        doc = ProcessedDocument(source="manual.txt", chunks=chunks, total_characters=18)
        assert doc.total_chunks == 3
        assert doc.processed_at
