"""Text and URL normalization helpers shared by discovery and extraction."""

from __future__ import annotations

import re
from urllib.parse import urlparse, urlunparse

_WHITESPACE_RE = re.compile(r"\s+")
_EXCESS_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n+")
_EXTENSION_RE = re.compile(r"\.\w+$")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_content(content: str | None) -> str:
    """Normalize scraped multi-paragraph content.

    Spaces inside each paragraph are collapsed and three or more newlines are
    folded into a single blank line, so paragraph breaks survive.
    """
    if not content:
        return ""
    paragraphs = [collapse_whitespace(p) for p in _EXCESS_BLANK_LINES_RE.sub("\n\n", content).split("\n\n")]
    return "\n\n".join(p for p in paragraphs if p)


def truncate(text: str, max_chars: int) -> str:
    """Return at most *max_chars* characters of *text*."""
    if max_chars < 0:
        raise ValueError(f"max_chars must be >= 0, got {max_chars}")
    return text[:max_chars]


def title_from_url(url: str) -> str:
    """Derive a readable title from the last path segment of *url*.

    ``https://site.com/blog/my-great-post`` becomes ``My Great Post``.
    Dashes and underscores become spaces, a trailing file extension is
    dropped, and the first letter of every word is upper-cased.  Returns the
    URL itself when there is no usable segment.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return url
    segments = [s for s in path.split("/") if s]
    if not segments:
        return url
    words = _EXTENSION_RE.sub("", re.sub(r"[-_]", " ", segments[-1])).split(" ")
    title = " ".join(w[:1].upper() + w[1:] for w in words if w)
    return title or url


def hostname(url: str) -> str:
    """Return the lower-cased host of *url* without a leading ``www.``."""
    try:
        host = (urlparse(url).hostname or "").lower().strip()
    except ValueError:
        return ""
    if host.startswith("www."):
        host = host[4:]
    return host


def normalize_url(url: str) -> str:
    """Canonical form used for deduplication: trimmed, fragment removed."""
    stripped = url.strip()
    try:
        parsed = urlparse(stripped)
    except ValueError:
        return stripped
    return urlunparse(parsed._replace(fragment=""))
