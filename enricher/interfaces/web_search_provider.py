"""Abstract base class for web-search service providers.

Defines the contract for the organic web searches used during reference
discovery.  Implementations may wrap a structured search API (Serper) or
scrape a results page through a proxy (ScraperAPI).  Reference discovery
only ever sees this interface, so the search engine can be swapped without
touching the ranking and filtering rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


# A plain frozen dataclass: search results are transient value objects that
# never leave the discovery stage.
@dataclass(frozen=True)
class SearchResult:
    """A single organic search result.

    Attributes
    ----------
    url:
        The absolute URL of the result page.
    title:
        The page title as returned by the search engine.  May be empty when
        the provider does not supply one.
    snippet:
        An optional text excerpt from the result.
    """

    url: str
    title: str = ""
    snippet: str | None = None


# Concrete implementations: SerperSearchProvider, ScraperApiGoogleProvider
# Located in: enricher/providers/search/
class IWebSearchProvider(ABC):
    """Contract for web-search services used during reference discovery."""

    @abstractmethod
    async def search(self, query: str, num_results: int = 10) -> list[SearchResult]:
        """Execute a web search and return the organic results.

        Parameters
        ----------
        query:
            The search query string.
        num_results:
            Maximum number of results to request from the engine.

        Returns
        -------
        list[SearchResult]
            Zero or more results in the engine's ranking order.

        Raises
        ------
        enricher.utils.errors.ConfigurationError
            If the provider credential is missing.
        enricher.utils.errors.ProviderError
            If the credential is rejected or the call fails permanently.
        enricher.utils.errors.RateLimitError
            If the provider reports a rate limit or exhausted quota.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"serper"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credential it needs."""
