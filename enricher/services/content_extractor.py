"""Content extraction: pull a clean title and body text out of a web page.

The page is rendered through an :class:`IPageRenderer`, then pruned and
queried through the :class:`IPageSnapshot` it returns:

1. Boilerplate (scripts, navigation, ads, cookie banners, modals) is removed.
2. The title is the first non-blank heading from ``TITLE_SELECTORS``,
   falling back to the ``<title>`` element cut at the first ``|`` and then
   at the first ``-``.
3. The body container is the first match of ``CONTENT_SELECTORS``, falling
   back to the whole ``<body>``.
4. Paragraph, subheading and list-item text inside the container is
   collected; short fragments and legal boilerplate are dropped and the
   rest joined with blank lines.

``extract`` never raises.  A failed render comes back as an error-flagged
:class:`ExtractedContent` so the pipeline can treat it like any other page
with too little content.
"""

from __future__ import annotations

import re

import structlog

from enricher.interfaces.page_renderer import IPageRenderer, IPageSnapshot
from enricher.models.content import ExtractedContent
from enricher.utils.errors import EnricherError
from enricher.utils.logging import get_logger
from enricher.utils.throttle import Throttle

REMOVE_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "iframe",
    "nav",
    "header",
    "footer",
    "aside",
    ".advertisement",
    ".ads",
    ".sidebar",
    ".comments",
    ".social-share",
    '[class*="cookie"]',
    '[class*="popup"]',
    '[class*="modal"]',
)

TITLE_SELECTORS: tuple[str, ...] = (
    "h1",
    "h1.title",
    ".article-title",
    ".post-title",
    "article h1",
)

CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content",
    '[class*="article"]',
    '[class*="post-content"]',
    '[role="main"]',
)

TEXT_SELECTORS: tuple[str, ...] = ("p", "h2", "h3", "h4", "li")

ERROR_TITLE = "Error loading article"

_BOILERPLATE_RE = re.compile(r"^(?:copyright|©|terms|privacy|cookie)", re.IGNORECASE)


def keep_fragment(text: str, min_length: int = 30) -> bool:
    """Return ``True`` if a text fragment is long enough and not legal boilerplate."""
    return len(text) >= min_length and not _BOILERPLATE_RE.match(text)


def fallback_title(document_title: str) -> str:
    """Trim site branding off a ``<title>``: ``"Post | Site"`` -> ``"Post"``."""
    return document_title.split("|")[0].split("-")[0].strip()


def extract_from_snapshot(snapshot: IPageSnapshot, min_fragment_length: int = 30) -> ExtractedContent:
    """Apply the extraction rules to an already-rendered page."""
    snapshot.remove_elements(REMOVE_SELECTORS)

    title = ""
    for selector in TITLE_SELECTORS:
        texts = snapshot.query_text([selector])
        # Only the first element for each selector is considered.
        if texts and texts[0]:
            title = texts[0]
            break
    if not title:
        title = fallback_title(snapshot.title)

    container = snapshot.first_match(CONTENT_SELECTORS)
    fragments = snapshot.query_text(TEXT_SELECTORS, within=container)
    body = "\n\n".join(f for f in fragments if keep_fragment(f, min_fragment_length))

    return ExtractedContent(title=title, content=body, url=snapshot.url)


class ContentExtractor:
    """Renders URLs and extracts their article text.

    Parameters
    ----------
    renderer:
        Turns a URL into a DOM snapshot.
    throttle:
        Spaces successive renders.  ``None`` disables spacing.
    min_fragment_length:
        Fragments shorter than this are dropped from the body.
    """

    def __init__(
        self,
        renderer: IPageRenderer,
        throttle: Throttle | None = None,
        min_fragment_length: int = 30,
    ) -> None:
        self._renderer = renderer
        self._throttle = throttle
        self._min_fragment_length = min_fragment_length
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def renderer(self) -> IPageRenderer:
        return self._renderer

    async def extract(self, url: str) -> ExtractedContent:
        """Render *url* and return its title and cleaned body text."""
        if self._throttle is not None:
            await self._throttle.wait()

        try:
            snapshot = await self._renderer.render(url)
            content = extract_from_snapshot(snapshot, self._min_fragment_length)
        except EnricherError as exc:
            return self._error_result(url, exc.message)
        except Exception as exc:  # noqa: BLE001 - any DOM failure becomes an error-flagged page
            return self._error_result(url, str(exc) or type(exc).__name__)

        if not content.is_sufficient():
            self._logger.warning("minimal_content_extracted", url=url, length=len(content.content))
        self._logger.info(
            "content_extracted",
            url=url,
            title=content.title[:80],
            length=len(content.content),
        )
        return content

    def _error_result(self, url: str, reason: str) -> ExtractedContent:
        self._logger.warning("content_extraction_failed", url=url, error=reason)
        return ExtractedContent(
            title=ERROR_TITLE,
            content=f"Failed to scrape content from {url}: {reason}",
            url=url,
            error=True,
        )
