"""Tests for prompt assembly and LLM providers."""

import pytest

from src.assistant.config import AssistantConfig, RunMode
from src.assistant.document import Chunk, RankedChunk, RankingMethod
from src.assistant.llm import (
    CONTEXT_SEPARATOR,
    MockLLMProvider,
    OpenAILLMProvider,
    build_prompt,
    create_llm_provider,
    format_context,
)


def make_ranked_chunk(text: str, source: str = "manual.txt", score: float = 0.9) -> RankedChunk:
    return RankedChunk(
        chunk=Chunk(text=text, source=source),
        similarity=score,
        method=RankingMethod.SEMANTIC,
    )


class TestFormatContext:
    def test_numbered_blocks(self) -> None:
        chunks = [
            make_ranked_chunk("Replace the filter.", source="hydraulics.txt"),
            make_ranked_chunk("Bleed the air.", source="hydraulics.txt"),
        ]
        context = format_context(chunks, "en")
        assert context == (
            "[Reference 1: hydraulics.txt]\nReplace the filter."
            f"{CONTEXT_SEPARATOR}"
            "[Reference 2: hydraulics.txt]\nBleed the air."
        )

    def test_japanese_label(self) -> None:
        context = format_context([make_ranked_chunk("フィルターを交換")], "ja")
        assert context.startswith("[参考資料 1: manual.txt]")


class TestBuildPrompt:
    def test_english_sections(self) -> None:
        prompt = build_prompt("Why is pressure low?", [make_ranked_chunk("Check the relief valve.")], "en")
        assert "[References]" in prompt
        assert "[Question]\nWhy is pressure low?" in prompt
        assert prompt.endswith("[Answer]\n")

    def test_japanese_sections(self) -> None:
        prompt = build_prompt("圧力が低い原因は？", [make_ranked_chunk("リリーフ弁を確認")], "ja")
        assert "【参考情報】" in prompt
        assert "【質問】\n圧力が低い原因は？" in prompt
        assert "日本語" in prompt

    def test_unsupported_language(self) -> None:
        with pytest.raises(ValueError, match="Unsupported language"):
            build_prompt("q", [], "fr")


class TestMockLLMProvider:
    def test_answer_echoes_first_reference(self) -> None:
        chunks = [
            make_ranked_chunk("Replace the hydraulic filter every 500 hours."),
            make_ranked_chunk("Check the oil level daily."),
        ]
        result = MockLLMProvider().generate(build_prompt("filter interval?", chunks, "en"))
        assert result.is_ok()
        assert "Replace the hydraulic filter every 500 hours." in result.unwrap()

    def test_deterministic(self) -> None:
        prompt = build_prompt("question", [make_ranked_chunk("Test content")], "en")
        llm = MockLLMProvider()
        assert llm.generate(prompt).unwrap() == llm.generate(prompt).unwrap()

    def test_prompt_without_references(self) -> None:
        result = MockLLMProvider().generate("plain prompt")
        assert "no details were found" in result.unwrap()

    def test_model_name(self) -> None:
        assert MockLLMProvider().model_name == "mock"


class TestOpenAILLMProvider:
    def test_client_failure_becomes_err(self, monkeypatch: pytest.MonkeyPatch) -> None:
        provider = OpenAILLMProvider(AssistantConfig(mode=RunMode.PRODUCTION))

        def broken_model() -> object:
            raise TimeoutError("request timed out")

        monkeypatch.setattr(provider, "_chat_model", broken_model)
        result = provider.generate("prompt")
        assert result.is_err()
        assert "timed out" in result.error  # type: ignore[union-attr]


class TestCreateLLMProvider:
    def test_mock_mode(self) -> None:
        assert isinstance(create_llm_provider(AssistantConfig(mode=RunMode.MOCK)), MockLLMProvider)

    def test_hybrid_mode_uses_mock_llm(self) -> None:
        assert isinstance(create_llm_provider(AssistantConfig(mode=RunMode.HYBRID)), MockLLMProvider)

    def test_production_mode(self) -> None:
        provider = create_llm_provider(AssistantConfig(mode=RunMode.PRODUCTION, llm_model="gpt-4o"))
        assert isinstance(provider, OpenAILLMProvider)
        assert provider.model_name == "gpt-4o"
