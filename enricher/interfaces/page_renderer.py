"""Abstract base classes for rendering web pages and querying their DOM.

Article sites increasingly build their body text with JavaScript, so the
extractor works against a *rendered* page.  Rendering is split in two:

- :class:`IPageRenderer` loads a URL (typically in a headless browser) and
  hands back a snapshot of the final document.
- :class:`IPageSnapshot` is the small DOM query surface the extraction rules
  need.  Keeping it narrow means the title/body heuristics can be tested
  against plain HTML strings without launching a browser.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class IPageSnapshot(ABC):
    """A mutable view of one rendered document."""

    @property
    @abstractmethod
    def url(self) -> str:
        """The URL the document was loaded from."""

    @property
    @abstractmethod
    def title(self) -> str:
        """Text of the document's ``<title>`` element, or ``""``."""

    @abstractmethod
    def remove_elements(self, selectors: Sequence[str]) -> int:
        """Delete every element matching any of *selectors*.

        Returns the number of elements removed.  Selectors the underlying
        engine cannot parse are skipped.
        """

    @abstractmethod
    def first_match(self, selectors: Sequence[str]) -> object | None:
        """Return a handle to the first element matching *selectors*.

        Selectors are tried in order; the first one that matches anything
        wins.  The handle is opaque and only meaningful as the ``within``
        argument of :meth:`query_text`.
        """

    @abstractmethod
    def query_text(self, selectors: Sequence[str], within: object | None = None) -> list[str]:
        """Return the whitespace-collapsed text of every matching element.

        Parameters
        ----------
        selectors:
            CSS selectors; an element matching several of them is returned
            once, in document order.
        within:
            An element handle from :meth:`first_match`.  ``None`` searches
            the whole document body.
        """


# Concrete implementation: PlaywrightPageRenderer (enricher/providers/renderer/)
class IPageRenderer(ABC):
    """Contract for services that turn a URL into an :class:`IPageSnapshot`."""

    @abstractmethod
    async def render(self, url: str) -> IPageSnapshot:
        """Load *url* and return a snapshot of the settled document.

        Raises
        ------
        enricher.utils.errors.ExtractionError
            On navigation failure, timeout, or browser error.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release any browser resources held by the renderer."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"playwright"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the renderer's runtime dependencies are present."""
