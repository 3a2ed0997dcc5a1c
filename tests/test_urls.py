"""
tests/test_urls.py

Unit tests for query-string merging.
"""

from __future__ import annotations

from keyless_scraper.urls import with_query


def test_appends_params_to_bare_url() -> None:
    assert with_query("https://example.com/search", {"q": "red shoes"}) == "https://example.com/search?q=red+shoes"


def test_keeps_existing_query() -> None:
    url = with_query("https://example.com/search?sort=asc", {"page": "2"})

    assert url == "https://example.com/search?sort=asc&page=2"


def test_empty_params_leave_url_untouched() -> None:
    assert with_query("https://example.com/a?b=1#frag", {}) == "https://example.com/a?b=1#frag"
    assert with_query("https://example.com/a", None) == "https://example.com/a"
