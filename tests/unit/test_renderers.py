"""Unit tests for the HTML snapshot and the Playwright page renderer."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from enricher.providers.renderer.html_snapshot import HtmlPageSnapshot
from enricher.providers.renderer.playwright_renderer import PlaywrightPageRenderer
from enricher.utils.errors import ExtractionError

PAGE = """
<html><head><title>  Bots   101 | Site </title></head>
<body>
  <nav><p>Menu</p></nav>
  <div class="content"><p>First</p><ul><li>Item</li></ul><p>Second</p></div>
</body></html>
"""


# ======================================================================
# HtmlPageSnapshot
# ======================================================================


class TestHtmlPageSnapshot:
    def test_title_collapsed(self) -> None:
        assert HtmlPageSnapshot(PAGE, "https://a.com").title == "Bots 101 | Site"

    def test_missing_title(self) -> None:
        assert HtmlPageSnapshot("<p>x</p>", "https://a.com").title == ""

    def test_remove_elements_counts_and_skips_bad_selectors(self) -> None:
        snapshot = HtmlPageSnapshot(PAGE, "https://a.com")
        assert snapshot.remove_elements(["nav", "[[bad", "aside"]) == 1
        assert "Menu" not in snapshot.query_text(["p"])

    def test_query_text_document_order(self) -> None:
        snapshot = HtmlPageSnapshot(PAGE, "https://a.com")
        assert snapshot.query_text(["p", "li"]) == ["Menu", "First", "Item", "Second"]

    def test_query_text_within_container(self) -> None:
        snapshot = HtmlPageSnapshot(PAGE, "https://a.com")
        container = snapshot.first_match([".missing", ".content"])
        assert snapshot.query_text(["p"], within=container) == ["First", "Second"]

    def test_first_match_none(self) -> None:
        assert HtmlPageSnapshot(PAGE, "https://a.com").first_match(["article", "main"]) is None

    def test_invalid_selector_in_query_raises(self) -> None:
        with pytest.raises(ExtractionError):
            HtmlPageSnapshot(PAGE, "https://a.com").query_text(["[[bad"])

    def test_foreign_handle_rejected(self) -> None:
        with pytest.raises(ExtractionError):
            HtmlPageSnapshot(PAGE, "https://a.com").query_text(["p"], within="not-an-element")


# ======================================================================
# PlaywrightPageRenderer
# ======================================================================


def _fake_playwright(html: str = "<html><body><p>hi</p></body></html>", goto_error: Exception | None = None):
    page = MagicMock()
    page.goto = AsyncMock(side_effect=goto_error)
    page.wait_for_timeout = AsyncMock()
    page.content = AsyncMock(return_value=html)
    page.url = "https://a.com/final"

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.is_connected.return_value = True
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    return starter, playwright, browser, context, page


class TestPlaywrightPageRenderer:
    @pytest.mark.asyncio
    async def test_render_returns_snapshot(self) -> None:
        starter, playwright, browser, context, page = _fake_playwright()
        with patch(
            "enricher.providers.renderer.playwright_renderer.async_playwright", return_value=starter
        ):
            renderer = PlaywrightPageRenderer(navigation_timeout=30.0, settle_delay=2.0)
            snapshot = await renderer.render("https://a.com/post")

        assert snapshot.url == "https://a.com/final"
        assert snapshot.query_text(["p"]) == ["hi"]
        page.goto.assert_awaited_once_with("https://a.com/post", wait_until="networkidle", timeout=30000)
        page.wait_for_timeout.assert_awaited_once_with(2000)
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_launched_once(self) -> None:
        starter, playwright, browser, context, page = _fake_playwright()
        with patch(
            "enricher.providers.renderer.playwright_renderer.async_playwright", return_value=starter
        ):
            renderer = PlaywrightPageRenderer(settle_delay=0.0)
            await renderer.render("https://a.com/1")
            await renderer.render("https://a.com/2")
            await renderer.close()

        playwright.chromium.launch.assert_awaited_once()
        assert browser.new_context.await_count == 2
        page.wait_for_timeout.assert_not_awaited()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_becomes_extraction_error(self) -> None:
        starter, _, _, context, _ = _fake_playwright(goto_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
        with patch(
            "enricher.providers.renderer.playwright_renderer.async_playwright", return_value=starter
        ):
            renderer = PlaywrightPageRenderer()
            with pytest.raises(ExtractionError, match="Navigation timeout"):
                await renderer.render("https://slow.com")
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_error_becomes_extraction_error(self) -> None:
        starter, _, _, _, _ = _fake_playwright(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED\ndetails"))
        with patch(
            "enricher.providers.renderer.playwright_renderer.async_playwright", return_value=starter
        ):
            renderer = PlaywrightPageRenderer()
            with pytest.raises(ExtractionError, match="ERR_NAME_NOT_RESOLVED"):
                await renderer.render("https://nowhere.invalid")

    def test_metadata(self) -> None:
        renderer = PlaywrightPageRenderer()
        assert renderer.get_provider_name() == "playwright"
        assert renderer.is_available() is True
