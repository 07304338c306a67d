"""Google results page fetched through ScraperAPI, parsed with BeautifulSoup.

Google does not serve result pages to plain HTTP clients for long, so the
request is relayed through ScraperAPI (https://www.scraperapi.com), which
rotates proxies and returns the raw HTML.  Organic results are the anchors
that wrap an ``<h3>`` heading; Google's ``/url?q=`` redirect links are
unwrapped to their target.
"""

from __future__ import annotations

from urllib.parse import parse_qs, quote_plus, urlparse

import httpx
import structlog
from bs4 import BeautifulSoup

from enricher.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from enricher.utils.errors import ConfigurationError, ProviderError, classify_http_error
from enricher.utils.text_normalizer import collapse_whitespace, hostname

logger = structlog.get_logger(logger_name=__name__)

_SCRAPER_API_URL = "https://api.scraperapi.com"
_DEFAULT_TIMEOUT = 60.0


def _unwrap_google_link(href: str) -> str | None:
    """Return the absolute target URL of a result anchor, or ``None``."""
    href = href.strip()
    if href.startswith("/url?"):
        params = parse_qs(urlparse(href).query)
        targets = params.get("q") or params.get("url")
        href = targets[0] if targets else ""
    if not href.startswith(("http://", "https://")):
        return None
    host = hostname(href)
    if not host or host.startswith("google.") or ".google." in host:
        return None
    return href


def parse_google_results(html: str, max_results: int = 10) -> list[SearchResult]:
    """Extract organic ``(url, title)`` pairs from a Google results page.

    Anchors containing an ``<h3>`` are taken first, in page order, with the
    heading as the title.  If the page has none (layout change, consent
    wall), every external absolute link is used with an empty title.
    """
    soup = BeautifulSoup(html, "html.parser")
    results: list[SearchResult] = []
    seen: set[str] = set()

    def _add(url: str | None, title: str) -> None:
        if url and url not in seen and len(results) < max_results:
            seen.add(url)
            results.append(SearchResult(url=url, title=title))

    for heading in soup.find_all("h3"):
        anchor = heading.find_parent("a", href=True)
        if anchor is None:
            continue
        _add(_unwrap_google_link(anchor["href"]), collapse_whitespace(heading.get_text(" ")))

    if not results:
        for anchor in soup.find_all("a", href=True):
            _add(_unwrap_google_link(anchor["href"]), "")

    return results


class ScraperApiGoogleProvider(IWebSearchProvider):
    """Google organic results scraped through the ScraperAPI proxy."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        if not self._api_key:
            raise ConfigurationError(
                message="SCRAPER_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )

        google_url = f"https://www.google.com/search?q={quote_plus(query)}&num={num_results}"
        try:
            response = await self._client.get(
                _SCRAPER_API_URL,
                params={"api_key": self._api_key, "url": google_url, "render": "false"},
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

        if not response.text:
            logger.warning("scraperapi_empty_response", query=query)
            return []

        results = parse_google_results(response.text, max_results=num_results)
        logger.debug("scraperapi_search_complete", query=query, result_count=len(results))
        return results

    async def close(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "scraperapi"

    def is_available(self) -> bool:
        return bool(self._api_key)
