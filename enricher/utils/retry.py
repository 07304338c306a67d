"""Shared retry-with-backoff combinator.

Reference discovery and content synthesis both talk to rate-limited
providers and both need the same policy: retry transient failures a fixed
number of times, waiting longer after each attempt, and surface the last
error once the attempts are exhausted.  This module is the single
implementation of that policy.

The delay schedule is supplied as a ``backoff`` callable so the policy can be
swapped without touching call sites; :func:`linear_backoff` gives the
``attempt × base`` schedule the pipeline uses.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from enricher.utils.errors import is_retryable as _default_is_retryable
from enricher.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


def linear_backoff(base_delay: float) -> Callable[[int], float]:
    """Return a backoff function yielding ``attempt * base_delay`` seconds."""

    def _delay(attempt: int) -> float:
        return attempt * base_delay

    return _delay


async def with_retry(
    operation: Callable[[], Awaitable[_T]],
    *,
    max_attempts: int,
    backoff: Callable[[int], float],
    is_retryable: Callable[[BaseException], bool] = _default_is_retryable,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    operation_name: str = "operation",
    logger: structlog.BoundLogger | None = None,
) -> _T:
    """Run *operation* until it succeeds or the attempt ceiling is reached.

    Parameters
    ----------
    operation:
        Zero-argument coroutine factory.  Called once per attempt.
    max_attempts:
        Total number of attempts, including the first.
    backoff:
        Maps the 1-based number of the attempt that just failed to the
        number of seconds to wait before the next one.
    is_retryable:
        Classifies an exception.  Non-retryable errors propagate at once.
    sleep:
        Awaitable sleep, injectable for tests.
    operation_name:
        Label used in log events.

    Returns
    -------
    The operation's result.

    Raises
    ------
    Exception
        The last error once attempts are exhausted, or the first
        non-retryable error.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    log = logger or _logger

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            if attempt >= max_attempts:
                log.warning(
                    "retry_exhausted",
                    operation=operation_name,
                    attempts=attempt,
                    error=str(exc),
                )
                raise
            delay = backoff(attempt)
            log.info(
                "retry_scheduled",
                operation=operation_name,
                attempt=attempt,
                max_attempts=max_attempts,
                delay_s=delay,
                error=str(exc),
            )
            await sleep(delay)
            attempt += 1
