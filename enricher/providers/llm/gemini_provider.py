"""Google Gemini LLM provider adapter.

Calls the Gemini REST ``generateContent`` endpoint directly with httpx
rather than through an SDK: a single-turn text request is one small JSON
POST, and talking HTTP keeps status-code classification (401/403 vs 429)
in our hands.

Request shape::

    POST /v1beta/models/{model}:generateContent
    {"contents": [{"parts": [{"text": prompt}]}],
     "generationConfig": {"temperature": 0.7, "maxOutputTokens": 8192}}

The generated text lives at ``candidates[0].content.parts[0].text``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from enricher.config.settings import Settings
from enricher.interfaces.llm_provider import ILLMProvider
from enricher.utils.errors import (
    ConfigurationError,
    EmptyResultError,
    EnricherError,
    ProviderError,
    RateLimitError,
    classify_http_error,
    mentions_quota,
)

logger = structlog.get_logger(logger_name=__name__)

_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


def _first_candidate_text(payload: dict[str, Any]) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or ``None`` if absent."""
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by the Gemini ``generateContent`` REST API."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model or "gemini-1.5-flash"
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def endpoint(self) -> str:
        return f"{_GEMINI_BASE_URL}/{self._model}:generateContent"

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
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        payload = await self._generate(body)

        text = _first_candidate_text(payload)
        if not text or not text.strip():
            block_reason = (payload.get("promptFeedback") or {}).get("blockReason")
            raise EmptyResultError(
                message=f"Gemini returned no candidate text (blockReason={block_reason})"
                if block_reason
                else "Gemini returned no candidate text",
                provider_name=self.get_provider_name(),
            )

        usage = payload.get("usageMetadata") or {}
        logger.info(
            "gemini_completion",
            model=self._model,
            prompt_chars=len(prompt),
            output_chars=len(text),
            tokens=usage.get("totalTokenCount"),
        )
        return text

    async def _generate(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="GEMINI_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        try:
            response = await self._client.post(
                self.endpoint,
                json=body,
                # Header auth keeps the key out of URLs that end up in logs.
                headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise ProviderError(
                message=f"Gemini request timed out: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"Gemini HTTP error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code != 200:
            raise classify_http_error(response.status_code, response.text, self.get_provider_name())

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                message="Gemini returned a non-JSON body",
                provider_name=self.get_provider_name(),
            ) from exc

        error = payload.get("error") if isinstance(payload, dict) else None
        if error:
            message = str(error.get("message", error))
            if mentions_quota(message) or error.get("status") == "RESOURCE_EXHAUSTED":
                raise RateLimitError(message=message, provider_name=self.get_provider_name())
            raise ProviderError(message=message, provider_name=self.get_provider_name())
        return payload

    async def validate_credentials(self) -> bool:
        """Send a tiny prompt to verify the API key is accepted."""
        if not self.is_available():
            return False
        try:
            payload = await self._generate(
                {
                    "contents": [{"parts": [{"text": 'Say "hello"'}]}],
                    "generationConfig": {"maxOutputTokens": 10},
                }
            )
        except EnricherError as exc:
            logger.warning("gemini_credentials_invalid", error=str(exc))
            return False
        return _first_candidate_text(payload) is not None

    async def close(self) -> None:
        await self._client.aclose()

    def is_available(self) -> bool:
        """Return ``True`` if a Gemini API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "gemini"
