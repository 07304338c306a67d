"""Shared pytest fixtures for the article enricher test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from enricher.config.loader import PipelineConfig
from enricher.interfaces.llm_provider import ILLMProvider
from enricher.interfaces.page_renderer import IPageRenderer
from enricher.interfaces.web_search_provider import IWebSearchProvider, SearchResult
from enricher.models.article import Article
from enricher.providers.renderer.html_snapshot import HtmlPageSnapshot

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

LONG_PARAGRAPH = (
    "Chatbots answer the repetitive questions so that support teams can spend their "
    "time on the conversations that really need a human touch."
)


def article_html(title: str, paragraphs: list[str]) -> str:
    """Return a minimal article page with boilerplate around the body."""
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        f"<html><head><title>{title} | Example Blog</title></head><body>"
        "<nav><p>Home / Blog / Archive / Contact us for more information</p></nav>"
        f"<article><h1>{title}</h1>{body}</article>"
        "<footer><p>Copyright 2024 Example Blog. All rights reserved worldwide.</p></footer>"
        "</body></html>"
    )


@pytest.fixture
def make_article() -> Callable[..., Article]:
    """Factory for valid, unprocessed articles."""

    def _make(**overrides: Any) -> Article:
        fields: dict[str, Any] = {
            "title": "Choosing the right AI chatbot",
            "content": "A short original article about chatbots. " * 5,
            "source_url": "https://beyondchats.com/blogs/choosing-the-right-ai-chatbot/",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),  # noqa: UP017
        }
        fields.update(overrides)
        return Article(**fields)

    return _make


@pytest.fixture
def fast_config() -> PipelineConfig:
    """Pipeline config with every delay disabled."""
    return PipelineConfig(
        search_interval=0.0,
        scrape_delay=0.0,
        settle_delay=0.0,
        article_delay=0.0,
        search_backoff=0.0,
        synthesis_backoff=0.0,
    )


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_search_provider() -> MagicMock:
    """IWebSearchProvider returning two article URLs."""
    provider = MagicMock(spec=IWebSearchProvider)
    provider.search = AsyncMock(
        return_value=[
            SearchResult(url="https://blog-one.com/post/chatbots", title="Chatbots Explained"),
            SearchResult(url="https://news-two.com/2024/05/ai-support", title="AI Support Guide"),
        ]
    )
    provider.get_provider_name.return_value = "mock-search"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_llm_provider() -> MagicMock:
    provider = MagicMock(spec=ILLMProvider)
    provider.complete = AsyncMock(return_value="## Improved article\n\nRewritten body.")
    provider.validate_credentials = AsyncMock(return_value=True)
    provider.get_provider_name.return_value = "mock-llm"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_renderer() -> MagicMock:
    """IPageRenderer serving a long article for every URL."""
    renderer = MagicMock(spec=IPageRenderer)

    async def _render(url: str) -> HtmlPageSnapshot:
        return HtmlPageSnapshot(article_html("Rendered Article", [LONG_PARAGRAPH, LONG_PARAGRAPH]), url)

    renderer.render = AsyncMock(side_effect=_render)
    renderer.close = AsyncMock()
    renderer.get_provider_name.return_value = "mock-renderer"
    renderer.is_available.return_value = True
    return renderer


@pytest.fixture
def recorded_sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)
