"""Request throttling for rate-limited collaborators.

Every stage of the enrichment pipeline talks to a third-party service that
punishes bursts: the search API, arbitrary article sites, and the
generative-text provider.  Rather than sprinkling ``asyncio.sleep`` calls
through the control flow, each collaborator that needs spacing receives a
:class:`Throttle` and awaits :meth:`Throttle.wait` before issuing a request.

The policy is a minimum interval between successive calls: the first call
goes through immediately, later calls sleep only for whatever part of the
interval has not already elapsed doing other work.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

import structlog

from enricher.utils.logging import get_logger


class Throttle:
    """Enforce a minimum delay between successive calls.

    Parameters
    ----------
    min_interval:
        Minimum number of seconds between the starts of two calls.
        ``0`` disables throttling.
    name:
        Label used in log events.
    sleep / clock:
        Injectable for deterministic tests.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        name: str = "throttle",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self._min_interval = min_interval
        self._name = name
        self._sleep = sleep
        self._clock = clock
        self._last_call: float | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def wait(self) -> float:
        """Block until the interval since the previous call has elapsed.

        Returns the number of seconds actually slept.
        """
        slept = 0.0
        if self._last_call is not None and self._min_interval > 0:
            elapsed = self._clock() - self._last_call
            remaining = self._min_interval - elapsed
            if remaining > 0:
                self._logger.debug("throttle_wait", throttle=self._name, delay_s=round(remaining, 3))
                await self._sleep(remaining)
                slept = remaining
        self._last_call = self._clock()
        return slept

    def reset(self) -> None:
        """Forget the previous call so the next one goes through immediately."""
        self._last_call = None
