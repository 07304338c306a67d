"""Page renderer implementations."""

from enricher.providers.renderer.html_snapshot import HtmlPageSnapshot
from enricher.providers.renderer.playwright_renderer import PlaywrightPageRenderer

__all__ = ["HtmlPageSnapshot", "PlaywrightPageRenderer"]
