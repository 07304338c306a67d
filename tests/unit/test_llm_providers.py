"""Unit tests for the generative-text provider adapters: Gemini, OpenAI, Anthropic."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from enricher.config.settings import Settings
from enricher.utils.errors import (
    ConfigurationError,
    EmptyResultError,
    ProviderError,
    RateLimitError,
)


def _settings(**overrides) -> Settings:
    defaults = {
        "gemini_api_key": "gemini-key",
        "gemini_model": "gemini-1.5-flash",
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_model": "gpt-4o-mini",
        "anthropic_api_key": "test-anthropic",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _gemini_payload(text: str) -> dict:
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}}],
        "usageMetadata": {"totalTokenCount": 42},
    }


# ======================================================================
# Gemini LLM Provider
# ======================================================================


class TestGeminiLLMProvider:
    @staticmethod
    def _provider(handler, **settings_overrides):
        from enricher.providers.llm.gemini_provider import GeminiLLMProvider

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiLLMProvider(_settings(**settings_overrides), http_client=client)

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["key"] = request.headers.get("x-goog-api-key")
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_payload("## Rewritten"))

        provider = self._provider(handler)
        result = await provider.complete("prompt text", temperature=0.7, max_tokens=8192)

        assert result == "## Rewritten"
        assert captured["url"].endswith("/models/gemini-1.5-flash:generateContent")
        assert captured["key"] == "gemini-key"
        assert captured["body"] == {
            "contents": [{"parts": [{"text": "prompt text"}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 8192},
        }

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self) -> None:
        provider = self._provider(lambda r: httpx.Response(200), gemini_api_key="")
        assert provider.is_available() is False
        with pytest.raises(ConfigurationError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_429_is_rate_limit(self) -> None:
        provider = self._provider(lambda r: httpx.Response(429, text="Too Many Requests"))
        with pytest.raises(RateLimitError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_quota_message_is_rate_limit(self) -> None:
        body = {"error": {"code": 400, "message": "Quota exceeded for metric", "status": "FAILED_PRECONDITION"}}
        provider = self._provider(lambda r: httpx.Response(200, json=body))
        with pytest.raises(RateLimitError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_resource_exhausted_status_is_rate_limit(self) -> None:
        body = {"error": {"code": 429, "message": "try later", "status": "RESOURCE_EXHAUSTED"}}
        provider = self._provider(lambda r: httpx.Response(200, json=body))
        with pytest.raises(RateLimitError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_other_payload_error_is_provider_error(self) -> None:
        body = {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}}
        provider = self._provider(lambda r: httpx.Response(200, json=body))
        with pytest.raises(ProviderError, match="Invalid argument"):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_key_is_provider_error(self, status: int) -> None:
        provider = self._provider(lambda r: httpx.Response(status, text="API key not valid"))
        with pytest.raises(ProviderError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_no_candidates_is_empty_result(self) -> None:
        body = {"candidates": [], "promptFeedback": {"blockReason": "SAFETY"}}
        provider = self._provider(lambda r: httpx.Response(200, json=body))
        with pytest.raises(EmptyResultError, match="SAFETY"):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_blank_text_is_empty_result(self) -> None:
        provider = self._provider(lambda r: httpx.Response(200, json=_gemini_payload("  ")))
        with pytest.raises(EmptyResultError):
            await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_validate_credentials(self) -> None:
        ok = self._provider(lambda r: httpx.Response(200, json=_gemini_payload("hello")))
        rejected = self._provider(lambda r: httpx.Response(403, text="denied"))
        assert await ok.validate_credentials() is True
        assert await rejected.validate_credentials() is False

    def test_get_provider_name(self) -> None:
        assert self._provider(lambda r: httpx.Response(200)).get_provider_name() == "gemini"


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    def test_provider_name_reflects_base_url(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        assert OpenAILLMProvider(_settings()).get_provider_name() == "openai"
        custom = OpenAILLMProvider(_settings(openai_base_url="http://localhost:8001/v1"))
        assert custom.get_provider_name() == "openai-compatible"

    def test_is_available_without_key(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_client_built_only_when_first_used(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI") as client_cls:
            provider = OpenAILLMProvider(_settings(openai_api_key=""))
            assert await provider.validate_credentials() is False
            with pytest.raises(ConfigurationError):
                await provider.complete("prompt")
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_client_reused_across_calls(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="text"))]
        mock_response.usage = None
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch(
            "enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ) as client_cls:
            provider = OpenAILLMProvider(_settings(openai_base_url="http://localhost:8001/v1"))
            await provider.complete("one")
            await provider.complete("two")

        client_cls.assert_called_once()
        assert client_cls.call_args.kwargs["base_url"] == "http://localhost:8001/v1"
        assert client_cls.call_args.kwargs["max_retries"] == 0

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="LLM response text"))]
        mock_response.usage = MagicMock(total_tokens=100)

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            result = await provider.complete("prompt", temperature=0.7, max_tokens=8192)

        assert result == "LLM response text"
        kwargs = mock_client.chat.completions.create.await_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["max_tokens"] == 8192

    @pytest.mark.asyncio
    async def test_rate_limit_mapped(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.RateLimitError(
                message="Rate limit exceeded",
                response=httpx.Response(429, request=request),
                body=None,
            )
        )

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(RateLimitError):
                await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_generic_api_error_mapped(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(message="boom", request=MagicMock(), body=None)
        )

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(ProviderError):
                await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_empty_content_is_empty_result(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=""))]
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(EmptyResultError):
                await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=AsyncMock()):
            provider = OpenAILLMProvider(_settings(openai_api_key=""))
            with pytest.raises(ConfigurationError):
                await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_validate_credentials_failure(self) -> None:
        from enricher.providers.llm.openai_provider import OpenAILLMProvider
        import openai

        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(
            side_effect=openai.APIError(message="Invalid key", request=MagicMock(), body=None)
        )

        with patch("enricher.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            assert await provider.validate_credentials() is False


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self) -> None:
        from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(type="text", text="## Heading"),
            MagicMock(type="tool_use", text="ignored"),
            MagicMock(type="text", text="Body."),
        ]
        mock_response.usage = MagicMock(input_tokens=10, output_tokens=20)

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("enricher.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            result = await provider.complete("prompt")

        assert result == "## Heading\nBody."

    @pytest.mark.asyncio
    async def test_no_text_is_empty_result(self) -> None:
        from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("enricher.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(EmptyResultError):
                await provider.complete("prompt")

    @pytest.mark.asyncio
    async def test_api_error_mapped(self) -> None:
        from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider
        import anthropic

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIError(message="overloaded", request=MagicMock(), body=None)
        )

        with patch("enricher.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(ProviderError):
                await provider.complete("prompt")

    def test_get_provider_name(self) -> None:
        from enricher.providers.llm.anthropic_provider import AnthropicLLMProvider

        with patch("enricher.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=AsyncMock()):
            assert AnthropicLLMProvider(_settings()).get_provider_name() == "anthropic"
