"""
tests/test_cache.py

Unit tests for the TTL response cache. Time is driven by a fake clock.
"""

from __future__ import annotations

from keyless_scraper.cache import ResponseCache
from keyless_scraper.config import ScraperConfiguration

URL = "https://example.com/page"


def _config(**overrides: object) -> ScraperConfiguration:
    return ScraperConfiguration.from_credentials(
        {"baseUrl": "https://example.com", "cacheResponses": True, "cacheTtl": 1, **overrides}
    )


def test_entry_valid_within_ttl_and_evicted_after(clock) -> None:
    cache = ResponseCache(clock=clock)
    config = _config()
    cache.put(URL, "<html></html>", {"content-type": "text/html"}, 200, config)

    clock.advance(0.5)
    cached = cache.get(URL, config)
    assert cached is not None
    assert cached.body == "<html></html>"
    assert cached.status_code == 200

    clock.advance(1.0)
    assert cache.get(URL, config) is None
    assert len(cache) == 0


def test_disabled_cache_neither_stores_nor_returns(clock) -> None:
    cache = ResponseCache(clock=clock)
    enabled = _config()
    disabled = _config(cacheResponses=False)

    cache.put(URL, "body", {}, 200, disabled)
    assert len(cache) == 0

    cache.put(URL, "body", {}, 200, enabled)
    assert cache.get(URL, disabled) is None
    assert cache.get(URL, enabled) is not None


def test_entries_keyed_by_exact_url(clock) -> None:
    cache = ResponseCache(clock=clock)
    config = _config()
    cache.put(URL, "body", {}, 200, config)
    assert cache.get(URL + "?page=2", config) is None


def test_clear(clock) -> None:
    cache = ResponseCache(clock=clock)
    config = _config()
    cache.put(URL, "body", {}, 200, config)
    cache.clear()
    assert cache.get(URL, config) is None
