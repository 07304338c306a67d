"""BeautifulSoup-backed implementation of IPageSnapshot.

The browser renderer serializes the settled DOM and wraps it here, so every
extraction rule runs against the same parser whether the HTML came from
Chromium or from a test fixture string.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from enricher.interfaces.page_renderer import IPageSnapshot
from enricher.utils.errors import ExtractionError
from enricher.utils.text_normalizer import collapse_whitespace

logger = structlog.get_logger(logger_name=__name__)


class HtmlPageSnapshot(IPageSnapshot):
    """A parsed HTML document that extraction rules can query and prune."""

    def __init__(self, html: str, url: str) -> None:
        self._soup = BeautifulSoup(html or "", "html.parser")
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    @property
    def title(self) -> str:
        if self._soup.title is None:
            return ""
        return collapse_whitespace(self._soup.title.get_text())

    def remove_elements(self, selectors: Sequence[str]) -> int:
        removed = 0
        for selector in selectors:
            try:
                matches = self._soup.select(selector)
            except SelectorSyntaxError:
                logger.debug("selector_skipped", selector=selector, url=self._url)
                continue
            for element in matches:
                element.decompose()
                removed += 1
        return removed

    def first_match(self, selectors: Sequence[str]) -> Tag | None:
        for selector in selectors:
            try:
                element = self._soup.select_one(selector)
            except SelectorSyntaxError:
                logger.debug("selector_skipped", selector=selector, url=self._url)
                continue
            if element is not None:
                return element
        return None

    def query_text(self, selectors: Sequence[str], within: object | None = None) -> list[str]:
        if within is not None and not isinstance(within, Tag):
            raise ExtractionError(
                message=f"Unsupported element handle {type(within).__name__}",
                provider_name="html",
            )
        root = within if within is not None else (self._soup.body or self._soup)
        try:
            # A selector list yields each element once, in document order.
            elements = root.select(", ".join(selectors))
        except SelectorSyntaxError as exc:
            raise ExtractionError(
                message=f"Invalid selector list {selectors!r}: {exc}",
                provider_name="html",
            ) from exc
        return [collapse_whitespace(element.get_text()) for element in elements]
