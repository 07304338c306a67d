"""Serper web-search provider implementing IWebSearchProvider.

Serper (https://serper.dev) proxies Google Search and returns structured
JSON, so no HTML parsing is needed.  Requests are authenticated with the
``X-API-KEY`` header.
"""

from __future__ import annotations

import httpx
import structlog

from enricher.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from enricher.utils.errors import ConfigurationError, ProviderError, classify_http_error

logger = structlog.get_logger(logger_name=__name__)

_SERPER_URL = "https://google.serper.dev/search"
_DEFAULT_TIMEOUT = 60.0


class SerperSearchProvider(IWebSearchProvider):
    """Google organic results via the Serper JSON API."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        """POST *query* to Serper and return its ``organic`` results in rank order."""
        if not self._api_key:
            raise ConfigurationError(
                message="SERPER_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )

        try:
            response = await self._client.post(
                _SERPER_URL,
                json={"q": query, "num": num_results},
                headers={"X-API-KEY": self._api_key, "Content-Type": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise ProviderError(
                message=f"Timeout searching for {query!r}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"HTTP error searching for {query!r}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code != 200:
            raise classify_http_error(response.status_code, response.text, self.get_provider_name())

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                message="Serper returned a non-JSON body",
                provider_name=self.get_provider_name(),
            ) from exc

        results: list[SearchResult] = []
        for item in payload.get("organic") or []:
            link = (item.get("link") or "").strip()
            if not link:
                continue
            results.append(
                SearchResult(
                    url=link,
                    title=(item.get("title") or "").strip(),
                    snippet=item.get("snippet"),
                )
            )
            if len(results) >= num_results:
                break

        logger.debug("serper_search_complete", query=query, result_count=len(results))
        return results

    async def close(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "serper"

    def is_available(self) -> bool:
        """Return ``True`` if a Serper API key is configured."""
        return bool(self._api_key)
