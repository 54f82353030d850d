"""LLM providers with dependency injection for mock mode.

Supports:
- OpenAI LLM (production)
- Mock LLM (demo/testing - returns template-based responses)
"""

from __future__ import annotations

import hashlib
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from src.assistant.config import AssistantConfig, RunMode
from src.assistant.document import RankedChunk
from src.assistant.result import Err, Ok, Result

CONTEXT_SEPARATOR = "\n\n---\n\n"

# Body of a "[label N: source]" reference block, up to the next blank line
_REFERENCE_BLOCK = re.compile(r"^\[[^\]\n]+ \d+: [^\]\n]*\]\n(.*?)(?:\n\n|\Z)", re.M | re.S)

_INSTRUCTIONS = {
    "ja": (
        "あなたは産業機器のトラブルシューティングを支援する技術サポートアシスタントです。"
        "以下の参考情報を使用して、ユーザーの質問に日本語で正確に答えてください。\n\n"
        "参考情報に含まれていない内容については、「参考資料には記載がありません」と明記してください。"
    ),
    "en": (
        "You are a technical support assistant for industrial equipment "
        "troubleshooting. Answer the user's question accurately in English "
        "using the reference information below.\n\n"
        "If something is not covered by the references, say explicitly that "
        "the reference material does not mention it."
    ),
}

_HEADINGS = {
    "ja": ("【参考情報】", "【質問】", "【回答】", "参考資料"),
    "en": ("[References]", "[Question]", "[Answer]", "Reference"),
}


def format_context(chunks: list[RankedChunk], language: str = "ja") -> str:
    """Join ranked chunks into numbered reference blocks."""
    label = _HEADINGS[language][3]
    return CONTEXT_SEPARATOR.join(
        f"[{label} {i}: {rc.source}]\n{rc.text}" for i, rc in enumerate(chunks, 1)
    )


def build_prompt(question: str, chunks: list[RankedChunk], language: str = "ja") -> str:
    """Build the troubleshooting prompt sent to the language model."""
    if language not in _INSTRUCTIONS:
        raise ValueError(f"Unsupported language: {language!r}")
    references, question_heading, answer_heading, _ = _HEADINGS[language]
    return (
        f"{_INSTRUCTIONS[language]}\n\n"
        f"{references}\n{format_context(chunks, language)}\n\n"
        f"{question_heading}\n{question}\n\n"
        f"{answer_heading}\n"
    )


class LLMProvider(ABC):
    """Abstract LLM provider interface."""

    @abstractmethod
    def generate(self, prompt: str) -> Result[str, str]:
        """Generate a completion for a fully assembled prompt."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...


class MockLLMProvider(LLMProvider):
    """Deterministic mock LLM for testing and demos.

    Echoes the start of the first reference block so answers stay tied to
    the retrieved context.
    """

    TEMPLATES = [
        "Based on the reference material, {summary}. Check the cited sections "
        "before carrying out the procedure.",
        "According to the available manuals, {summary}. ({reference_count} "
        "reference passages were consulted.)",
        "The retrieved references indicate that {summary}. Follow the safety "
        "steps in the manual while working on the equipment.",
    ]

    @property
    def model_name(self) -> str:
        return "mock"

    def generate(self, prompt: str) -> Result[str, str]:
        try:
            reference_count = prompt.count(CONTEXT_SEPARATOR) + 1
            summary = " ".join(self._first_reference(prompt).split()[:20])

            template_index = (
                int(hashlib.md5(prompt.encode()).hexdigest()[:4], 16) % len(self.TEMPLATES)
            )
            return Ok(
                self.TEMPLATES[template_index].format(
                    summary=summary or "no details were found",
                    reference_count=reference_count,
                )
            )
        except Exception as e:
            return Err(f"Mock generation failed: {e}")

    @staticmethod
    def _first_reference(prompt: str) -> str:
        match = _REFERENCE_BLOCK.search(prompt)
        return match.group(1) if match else ""


class OpenAILLMProvider(LLMProvider):
    """OpenAI API LLM provider for production use."""

    def __init__(self, config: AssistantConfig) -> None:
        self._config = config
        self._llm: Optional[Any] = None

    @property
    def model_name(self) -> str:
        return self._config.llm_model

    def _chat_model(self) -> Any:
        if self._llm is None:
            from langchain_openai import ChatOpenAI

            self._llm = ChatOpenAI(
                model=self._config.llm_model,
                temperature=self._config.llm_temperature,
                max_tokens=self._config.llm_max_tokens,
                openai_api_key=self._config.openai_api_key,
                timeout=self._config.request_timeout,
            )
        return self._llm

    def generate(self, prompt: str) -> Result[str, str]:
        try:
            response = self._chat_model().invoke(prompt)
            return Ok(str(response.content))
        except ImportError:
            return Err("langchain-openai not installed")
        except Exception as e:
            return Err(f"OpenAI generation failed: {e}")


def create_llm_provider(config: AssistantConfig) -> LLMProvider:
    """Factory function to create the appropriate LLM provider."""
    if config.mode in (RunMode.MOCK, RunMode.HYBRID):
        return MockLLMProvider()
    return OpenAILLMProvider(config)
