"""Troubleshooting assistant core - configuration, models, and providers."""

from src.assistant.config import AssistantConfig, MockConfig, RunMode
from src.assistant.result import Result, Ok, Err

__all__ = ["AssistantConfig", "MockConfig", "RunMode", "Result", "Ok", "Err"]
