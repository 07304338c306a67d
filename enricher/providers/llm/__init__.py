"""Generative-text provider implementations."""

from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider
from enricher.providers.llm.gemini_provider import GeminiLLMProvider
from enricher.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "GeminiLLMProvider", "OpenAILLMProvider"]
