"""Reference discovery: find competing articles for a title.

Queries a web-search provider and turns its organic results into a short,
ranked list of candidate reference URLs.

Filtering rules, applied in provider rank order:

1. **Denylist** - social networks, video platforms, encyclopedic
   aggregators, code hosting and the search engine's own links never make
   good rewrite references.  A URL is excluded when its host or any parent
   domain is listed, so ``m.youtube.com`` and ``en.wikipedia.org`` are
   caught as well.
2. **Deduplication** - by URL with the ``#fragment`` removed.
3. **Truncation** - to ``max_results``, only after 1 and 2, so a denied or
   duplicate result never costs a slot.

Results whose provider title is missing get one derived from the URL path.
Blog/article indicator substrings are computed and logged but do not filter
or reorder: the search engine's ranking is trusted.
"""

from __future__ import annotations

import re
from typing import Awaitable, Callable

import structlog

from enricher.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from enricher.utils.errors import RateLimitError
from enricher.utils.logging import get_logger
from enricher.utils.retry import linear_backoff, with_retry
from enricher.utils.text_normalizer import hostname, normalize_url, title_from_url
from enricher.utils.throttle import Throttle

DENYLIST: frozenset[str] = frozenset(
    {
        # search engine self-links
        "gstatic.com",
        "googleapis.com",
        # video
        "youtube.com",
        "youtu.be",
        "vimeo.com",
        "tiktok.com",
        # social
        "facebook.com",
        "twitter.com",
        "x.com",
        "instagram.com",
        "linkedin.com",
        "pinterest.com",
        "reddit.com",
        "quora.com",
        # encyclopedic aggregators
        "wikipedia.org",
        "wikimedia.org",
        "britannica.com",
        # code hosting and Q&A
        "github.com",
        "gitlab.com",
        "bitbucket.org",
        "stackoverflow.com",
    }
)

# google.com, google.co.uk, google.de ...
_GOOGLE_HOST_RE = re.compile(r"^(?:[\w-]+\.)*google\.[a-z]{2,3}(?:\.[a-z]{2})?$")

ARTICLE_INDICATORS: tuple[str, ...] = (
    "blog",
    "article",
    "post",
    "news",
    "guide",
    "tutorial",
    "insights",
    "resources",
)
_YEAR_PATH_RE = re.compile(r"/20\d{2}/")

# Organic results requested per search.
SEARCH_CANDIDATES = 10


def is_denied(url: str) -> bool:
    """Return ``True`` if *url*'s host or any parent domain is on the denylist."""
    host = hostname(url)
    if not host:
        return True
    if _GOOGLE_HOST_RE.match(host):
        return True
    labels = host.split(".")
    return any(".".join(labels[i:]) in DENYLIST for i in range(len(labels) - 1))


def article_indicators(url: str) -> list[str]:
    """Return the blog/article markers found in *url* (informational only)."""
    lowered = url.lower()
    found = [marker for marker in ARTICLE_INDICATORS if marker in lowered]
    if _YEAR_PATH_RE.search(lowered):
        found.append("dated-path")
    return found


def filter_results(results: list[SearchResult], max_results: int) -> list[SearchResult]:
    """Apply denylist, deduplication, title fallback and truncation, in that order."""
    kept: list[SearchResult] = []
    seen: set[str] = set()
    for result in results:
        url = result.url.strip()
        if not url or is_denied(url):
            continue
        key = normalize_url(url)
        if key in seen:
            continue
        seen.add(key)
        title = result.title.strip() or title_from_url(url)
        kept.append(SearchResult(url=url, title=title, snippet=result.snippet))
        if len(kept) >= max_results:
            break
    return kept


class ReferenceDiscovery:
    """Finds candidate reference articles for an article title.

    Parameters
    ----------
    search_provider:
        The web-search backend.
    throttle:
        Spaces successive search calls.  ``None`` disables spacing.
    max_attempts / backoff_base:
        Retry policy for rate-limited searches: ``attempt * backoff_base``
        seconds between attempts.
    """

    def __init__(
        self,
        search_provider: IWebSearchProvider,
        throttle: Throttle | None = None,
        max_attempts: int = 3,
        backoff_base: float = 2.0,
        search_candidates: int = SEARCH_CANDIDATES,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._provider = search_provider
        self._throttle = throttle
        self._max_attempts = max_attempts
        self._backoff = linear_backoff(backoff_base)
        self._search_candidates = search_candidates
        self._sleep = sleep
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def provider(self) -> IWebSearchProvider:
        return self._provider

    async def find_references(self, query: str, max_results: int = 2) -> list[SearchResult]:
        """Return up to *max_results* candidate reference URLs for *query*.

        Raises
        ------
        ValueError
            If *query* is blank or *max_results* is not positive.
        ConfigurationError
            If the search credential is missing.
        ProviderError
            If the credential is rejected or the call fails permanently.
        RateLimitError
            If the provider is still throttling after all attempts.
        """
        if not query or not query.strip():
            raise ValueError("query must be a non-empty string")
        if max_results < 1:
            raise ValueError(f"max_results must be >= 1, got {max_results}")
        query = query.strip()

        async def _search() -> list[SearchResult]:
            if self._throttle is not None:
                await self._throttle.wait()
            return await self._provider.search(query, num_results=self._search_candidates)

        retry_kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
        raw = await with_retry(
            _search,
            max_attempts=self._max_attempts,
            backoff=self._backoff,
            is_retryable=lambda exc: isinstance(exc, RateLimitError),
            operation_name=f"{self._provider.get_provider_name()}_search",
            logger=self._logger,
            **retry_kwargs,
        )

        references = filter_results(raw, max_results)
        for rank, ref in enumerate(references, start=1):
            self._logger.debug(
                "reference_candidate",
                rank=rank,
                url=ref.url,
                title=ref.title,
                indicators=article_indicators(ref.url),
            )
        self._logger.info(
            "references_discovered",
            query=query,
            provider=self._provider.get_provider_name(),
            raw_results=len(raw),
            kept=len(references),
        )
        return references
