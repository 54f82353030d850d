"""Tests for character chunking."""

import pytest
from hypothesis import given, settings, strategies as st

from src.assistant.document import Document
from src.ingestion.chunker import CharacterChunker, TextSpan


class TestCharacterChunker:
    def test_short_text_is_single_chunk(self) -> None:
        spans = CharacterChunker(chunk_size=100, overlap=20).split("pump seal leak")
        assert spans == [TextSpan(text="pump seal leak", start_index=0, end_index=14)]

    def test_windows_overlap(self) -> None:
        text = "abcdefghij" * 3
        spans = CharacterChunker(chunk_size=10, overlap=4).split(text)

        assert spans[0].text == text[0:10]
        assert spans[1].start_index == 6
        assert spans[0].text[-4:] == spans[1].text[:4]

    def test_stops_at_end_of_text(self) -> None:
        spans = CharacterChunker(chunk_size=10, overlap=2).split("x" * 18)
        assert [(s.start_index, s.end_index) for s in spans] == [(0, 10), (8, 18)]

    def test_japanese_text_without_spaces(self) -> None:
        text = "油圧ユニットの圧力が低下した場合はフィルターを交換してください。"
        spans = CharacterChunker(chunk_size=10, overlap=3).split(text)
        assert len(spans) > 1
        assert all(len(s.text) <= 10 for s in spans)

    def test_drops_whitespace_only_windows(self) -> None:
        text = "valve" + " " * 20 + "motor"
        spans = CharacterChunker(chunk_size=8, overlap=2).split(text)
        assert all(s.text.strip() for s in spans)

    def test_empty_text(self) -> None:
        assert CharacterChunker().split("") == []

    def test_chunk_document(self) -> None:
        doc = Document(content="Replace the hydraulic filter.", source="manual.txt")
        spans = CharacterChunker(chunk_size=1000, overlap=200).chunk(doc)
        assert len(spans) == 1
        assert spans[0].text == doc.content

    def test_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError, match="chunk_size"):
            CharacterChunker(chunk_size=0)

    def test_negative_overlap(self) -> None:
        with pytest.raises(ValueError, match="overlap"):
            CharacterChunker(chunk_size=10, overlap=-1)

    def test_overlap_not_less_than_size(self) -> None:
        with pytest.raises(ValueError, match="less than chunk_size"):
            CharacterChunker(chunk_size=10, overlap=10)

    @given(
        st.text(alphabet="ab ", min_size=1, max_size=300),
        st.integers(min_value=2, max_value=50),
        st.data(),
    )
    @settings(max_examples=50)
    def test_spans_cover_text(self, text: str, size: int, data: st.DataObject) -> None:
        overlap = data.draw(st.integers(min_value=0, max_value=size - 1))
        spans = CharacterChunker(chunk_size=size, overlap=overlap).split(text)

        for span in spans:
            assert span.text == text[span.start_index : span.end_index]
            assert len(span.text) <= size
        if text.strip():
            assert spans
            assert spans[-1].end_index == len(text) or not text[spans[-1].end_index :].strip()
