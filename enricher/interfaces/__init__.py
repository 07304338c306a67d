"""Abstract interfaces for every external collaborator of the pipeline.

Services depend on these ABCs only; concrete adapters live under
``enricher/providers/`` and are wired together in ``enricher.main``.
"""

from enricher.interfaces.article_store import IArticleStore
from enricher.interfaces.llm_provider import ILLMProvider
from enricher.interfaces.page_renderer import IPageRenderer, IPageSnapshot
from enricher.interfaces.web_search_provider import IWebSearchProvider, SearchResult

__all__ = [
    "IArticleStore",
    "ILLMProvider",
    "IPageRenderer",
    "IPageSnapshot",
    "IWebSearchProvider",
    "SearchResult",
]
