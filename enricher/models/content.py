"""Transient content produced by the extraction stage."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ExtractedContent(BaseModel):
    """Title and cleaned body text pulled out of one rendered page.

    Never persisted.  When rendering or DOM processing fails the extractor
    still returns an instance, with ``error=True`` and a diagnostic body, so
    callers treat the page as "insufficient content" instead of crashing.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    content: str
    url: str
    error: bool = False

    def is_sufficient(self, min_length: int = 100) -> bool:
        """Return ``True`` if this page can be used as a synthesis reference."""
        return not self.error and len(self.content) >= min_length
