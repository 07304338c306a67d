"""Utility modules for the article enricher.

Available utility modules (re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at EnricherError,
  plus helpers that classify provider HTTP failures and decide what is
  worth retrying.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **retry** -- The ``with_retry`` combinator and ``linear_backoff`` schedule
  shared by reference discovery and content synthesis.
- **throttle** -- Minimum-interval ``Throttle`` injected wherever the
  pipeline must space out requests.
- **text_normalizer** -- Whitespace cleanup, truncation, URL host and
  title derivation.
"""

from enricher.utils.errors import (
    ConfigurationError,
    EmptyResultError,
    EnricherError,
    ExtractionError,
    PersistenceError,
    PipelineError,
    ProviderError,
    RateLimitError,
    classify_http_error,
    is_retryable,
)
from enricher.utils.logging import configure_logging, get_logger
from enricher.utils.retry import linear_backoff, with_retry
from enricher.utils.throttle import Throttle

__all__ = [
    "ConfigurationError",
    "EmptyResultError",
    "EnricherError",
    "ExtractionError",
    "PersistenceError",
    "PipelineError",
    "ProviderError",
    "RateLimitError",
    "Throttle",
    "classify_http_error",
    "configure_logging",
    "get_logger",
    "is_retryable",
    "linear_backoff",
    "with_retry",
]
