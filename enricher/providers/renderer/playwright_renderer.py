"""Headless Chromium page renderer built on Playwright.

Each ``render`` call opens a fresh browser context (its own cookies and
storage), navigates, waits for the network to go idle plus a fixed settle
delay for late client-side rendering, and serializes the DOM into an
:class:`HtmlPageSnapshot`.  The browser process itself is launched lazily
on the first render and reused until :meth:`close`.
"""

from __future__ import annotations

import asyncio

import structlog
from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from enricher.interfaces.page_renderer import IPageRenderer, IPageSnapshot
from enricher.providers.renderer.html_snapshot import HtmlPageSnapshot
from enricher.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_VIEWPORT = {"width": 1920, "height": 1080}
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class PlaywrightPageRenderer(IPageRenderer):
    """Render pages in headless Chromium.

    Parameters
    ----------
    headless:
        Run Chromium without a window.
    navigation_timeout:
        Seconds allowed for navigation to reach network idle.
    settle_delay:
        Seconds to wait after network idle before reading the DOM.
    """

    def __init__(
        self,
        headless: bool = True,
        navigation_timeout: float = 30.0,
        settle_delay: float = 2.0,
    ) -> None:
        self._headless = headless
        self._navigation_timeout_ms = int(navigation_timeout * 1000)
        self._settle_delay_ms = int(settle_delay * 1000)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is None or not self._browser.is_connected():
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=_LAUNCH_ARGS,
                )
                logger.info("browser_launched", headless=self._headless)
            return self._browser

    async def render(self, url: str) -> IPageSnapshot:
        try:
            browser = await self._ensure_browser()
            context = await browser.new_context(viewport=_VIEWPORT, user_agent=_USER_AGENT)
        except PlaywrightError as exc:
            raise ExtractionError(
                message=f"Browser unavailable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=self._navigation_timeout_ms)
            if self._settle_delay_ms:
                await page.wait_for_timeout(self._settle_delay_ms)
            html = await page.content()
            final_url = page.url or url
        except PlaywrightTimeoutError as exc:
            raise ExtractionError(
                message=f"Navigation timeout after {self._navigation_timeout_ms} ms",
                provider_name=self.get_provider_name(),
            ) from exc
        except PlaywrightError as exc:
            raise ExtractionError(
                message=str(exc).splitlines()[0] if str(exc) else "Navigation failed",
                provider_name=self.get_provider_name(),
            ) from exc
        finally:
            await context.close()

        logger.debug("page_rendered", url=url, final_url=final_url, html_length=len(html))
        return HtmlPageSnapshot(html, final_url)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    def get_provider_name(self) -> str:
        return "playwright"

    def is_available(self) -> bool:
        return True
