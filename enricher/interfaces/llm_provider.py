"""Abstract base class for generative-text providers.

Defines the contract for the model that rewrites an article from its
original body and the extracted reference texts.  Implementations wrap the
Gemini REST API, OpenAI, or Anthropic.  The synthesizer builds a single
prompt and never needs to know which backend answers it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: GeminiLLMProvider, OpenAILLMProvider, AnthropicLLMProvider
# Located in: enricher/providers/llm/
class ILLMProvider(ABC):
    """Contract for generative-text services used by content synthesis."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> str:
        """Generate text for a single-turn prompt.

        Parameters
        ----------
        prompt:
            The full prompt text.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on the number of output tokens.

        Returns
        -------
        str
            The text of the first candidate.

        Raises
        ------
        enricher.utils.errors.ConfigurationError
            If the API key is missing.
        enricher.utils.errors.ProviderError
            If the key is rejected or the request fails permanently.
        enricher.utils.errors.RateLimitError
            On HTTP 429 or a quota/rate-limit message.
        enricher.utils.errors.EmptyResultError
            If the response carries no candidate text.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Make a minimal live call and return ``True`` if the key works."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"gemini"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
