"""Web search provider implementations."""

from enricher.providers.search.scraperapi_provider import ScraperApiGoogleProvider
from enricher.providers.search.serper_provider import SerperSearchProvider

__all__ = ["ScraperApiGoogleProvider", "SerperSearchProvider"]
