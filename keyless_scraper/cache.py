"""
In-memory TTL cache of successful responses, keyed by absolute URL.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from keyless_scraper.config.models import ScraperConfiguration
from keyless_scraper.types import CachedResponse


class ResponseCache:
    """
    Expired entries are evicted lazily on lookup; there is no background sweep.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CachedResponse] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, url: str, config: ScraperConfiguration) -> CachedResponse | None:
        if not config.cache_responses:
            return None

        cached = self._entries.get(url)
        if cached is None:
            return None
        if not cached.is_valid(self._clock()):
            del self._entries[url]
            return None
        return cached

    def put(
        self,
        url: str,
        body: str,
        headers: dict[str, str],
        status_code: int,
        config: ScraperConfiguration,
        *,
        content: bytes = b"",
    ) -> None:
        if not config.cache_responses:
            return

        self._entries[url] = CachedResponse(
            body=body,
            headers=dict(headers),
            status_code=status_code,
            timestamp=self._clock(),
            ttl=config.cache_ttl,
            content=content,
        )

    def clear(self) -> None:
        self._entries.clear()
