"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`
via the Claude Messages API.  Responses are a list of content blocks; the
text blocks are joined to form the rewritten article.
"""

from __future__ import annotations

import anthropic
import structlog

from enricher.config.settings import Settings
from enricher.interfaces.llm_provider import ILLMProvider
from enricher.utils.errors import (
    ConfigurationError,
    EmptyResultError,
    ProviderError,
    RateLimitError,
    classify_http_error,
)

logger = structlog.get_logger(logger_name=__name__)


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API."""

    def __init__(self, settings: Settings, timeout: float = 60.0) -> None:
        self._api_key = settings.anthropic_api_key
        self._client = anthropic.AsyncAnthropic(
            api_key=self._api_key,
            timeout=timeout,
            max_retries=0,
        )
        self._model = settings.anthropic_model or "claude-sonnet-4-20250514"

    async def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> str:
        if not self._api_key:
            raise ConfigurationError(
                message="ANTHROPIC_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(
                message="Anthropic rate limit exceeded",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIStatusError as exc:
            raise classify_http_error(exc.status_code, exc.message, self.get_provider_name()) from exc
        except anthropic.APIError as exc:
            raise ProviderError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        result = "\n".join(text_blocks)
        if not result.strip():
            raise EmptyResultError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return result

    async def validate_credentials(self) -> bool:
        """Try a minimal completion to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except anthropic.APIError as exc:
            logger.warning("anthropic_credentials_invalid", error=str(exc))
            return False

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "anthropic"
