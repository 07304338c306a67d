"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.  When
``openai_base_url`` is configured the client points at that URL instead, so
any OpenAI-compatible service (TogetherAI, Groq, a local vLLM) can do the
rewriting.
"""

from __future__ import annotations

import openai
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


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API."""

    def __init__(self, settings: Settings, timeout: float = 60.0) -> None:
        self._api_key = settings.openai_api_key
        self._base_url = settings.openai_base_url
        self._timeout = timeout
        self._client: openai.AsyncOpenAI | None = None
        self._model = settings.openai_model or "gpt-4o-mini"
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    def _get_client(self) -> openai.AsyncOpenAI:
        """Create the SDK client on first use; the SDK refuses an empty key."""
        if self._client is None:
            client_kwargs: dict = {
                "api_key": self._api_key,
                "timeout": openai.Timeout(self._timeout, connect=5.0),
                # Retries are owned by the synthesizer's retry policy.
                "max_retries": 0,
            }
            if self._base_url:
                client_kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> str:
        if not self._api_key:
            raise ConfigurationError(
                message="OPENAI_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        try:
            response = await self._get_client().chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.RateLimitError as exc:
            raise RateLimitError(
                message=f"{self._provider_label} rate limit or quota exceeded",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIStatusError as exc:
            raise classify_http_error(exc.status_code, exc.message, self.get_provider_name()) from exc
        except openai.APITimeoutError as exc:
            raise ProviderError(
                message=f"{self._provider_label} request timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise ProviderError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise EmptyResultError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    async def validate_credentials(self) -> bool:
        """List models to confirm the key is accepted without inference cost."""
        if not self.is_available():
            return False
        try:
            await self._get_client().models.list()
            return True
        except openai.APIError as exc:
            logger.warning("openai_credentials_invalid", error=str(exc))
            return False

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label
