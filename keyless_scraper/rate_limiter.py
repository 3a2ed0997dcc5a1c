"""
Minimum-interval request rate limiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from keyless_scraper.config.models import ScraperConfiguration
from keyless_scraper.logging_utils import log_event

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforces a minimum delay between the starts of successive requests.

    One timer guards every outbound request of the owning executor regardless
    of target origin. It is not a mutex: concurrent callers that read the same
    timestamp may proceed together.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._last_request_time: float | None = None

    @property
    def last_request_time(self) -> float | None:
        return self._last_request_time

    async def wait_for_rate_limit(
        self,
        config: ScraperConfiguration,
        *,
        crawl_delay_ms: float | None = None,
    ) -> float:
        """
        Suspend until the configured delay has elapsed; return seconds waited.

        A robots.txt crawl-delay longer than the configured delay wins.
        """

        min_interval = max(config.request_delay, crawl_delay_ms or 0.0) / 1000.0
        waited = 0.0
        if self._last_request_time is not None:
            elapsed = self._clock() - self._last_request_time
            if elapsed < min_interval:
                waited = min_interval - elapsed
                log_event(
                    logger,
                    logging.DEBUG,
                    "rate_limit_wait",
                    wait_seconds=round(waited, 3),
                    min_interval_seconds=min_interval,
                )
                await self._sleep(waited)

        self._last_request_time = self._clock()
        return waited
