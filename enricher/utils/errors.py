"""Custom exception hierarchy for the article enricher.

All application exceptions inherit from :class:`EnricherError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "serper", "gemini", "playwright") caused the failure.

The hierarchy is organized by how the pipeline reacts to each failure:

    EnricherError  (base -- catch-all for any enricher error)
    +-- ConfigurationError  (missing/invalid credential -- fatal to the run)
    +-- ProviderError       (credential rejected / permanent provider failure)
    +-- RateLimitError      (HTTP 429 or quota exhausted -- retryable)
    +-- EmptyResultError    (provider answered with no usable candidate -- retryable)
    +-- ExtractionError     (page render / DOM failure)
    +-- PersistenceError    (record store write failure)
    +-- PipelineError       (run could not start: article batch unreadable)

Callers retry on RateLimitError and EmptyResultError, skip the article on
ProviderError, and abort the whole run on ConfigurationError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enricher.models.pipeline import PipelineRunStats


class EnricherError(Exception):
    """Base exception for all enricher errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[gemini] Quota exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup / configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(EnricherError):
    """Raised when a credential or setting is missing or invalid.

    Fatal to the whole run, never retried.  When it aborts a run part-way,
    ``partial_stats`` holds the outcomes of the articles processed before it.
    """

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.partial_stats: PipelineRunStats | None = None


# ---------------------------------------------------------------------------
# External provider errors
# ---------------------------------------------------------------------------

class ProviderError(EnricherError):
    """Raised when a provider rejects the request permanently (HTTP 401/403, bad payload)."""

    def __init__(
        self,
        message: str = "Provider rejected the request",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.status_code = status_code


class RateLimitError(EnricherError):
    """Raised when a provider rate limit or quota is exceeded.

    Retried with linear backoff by :func:`enricher.utils.retry.with_retry`.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyResultError(EnricherError):
    """Raised when a generative provider returns no candidate text."""

    def __init__(
        self,
        message: str = "Provider returned no content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(EnricherError):
    """Raised by page renderers on navigation, timeout, or DOM failures."""

    def __init__(
        self,
        message: str = "Page extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage / orchestration errors
# ---------------------------------------------------------------------------

class PersistenceError(EnricherError):
    """Raised when an article update cannot be written to any store."""

    def __init__(
        self,
        message: str = "Article update could not be persisted",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineError(EnricherError):
    """Raised when a run cannot start, e.g. no store can list the batch."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------

_QUOTA_MARKERS = ("quota", "rate limit", "rate-limit", "ratelimit", "too many requests", "resource_exhausted")


def mentions_quota(text: str | None) -> bool:
    """Return ``True`` if a provider message reports a rate limit or exhausted quota."""
    if not text:
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in _QUOTA_MARKERS)


def classify_http_error(
    status_code: int,
    body: str | None,
    provider_name: str,
) -> EnricherError:
    """Map a failed provider HTTP response onto the error taxonomy.

    401/403 mean the credential was refused; 429 or a quota message in the
    body means the provider is throttling us.  Anything else is a permanent
    rejection for this call.
    """
    snippet = (body or "")[:200]
    if status_code == 429 or mentions_quota(body):
        return RateLimitError(
            message=f"HTTP {status_code}: rate limit or quota exceeded",
            provider_name=provider_name,
        )
    if status_code in (401, 403):
        return ProviderError(
            message=f"HTTP {status_code}: credential rejected",
            provider_name=provider_name,
            status_code=status_code,
        )
    return ProviderError(
        message=f"HTTP {status_code}: {snippet}".rstrip(": "),
        provider_name=provider_name,
        status_code=status_code,
    )


def is_retryable(exc: BaseException) -> bool:
    """Return ``True`` for transient failures worth another attempt."""
    return isinstance(exc, (RateLimitError, EmptyResultError))
