"""
tests/test_robots.py

Unit tests for robots.txt parsing, path matching and the policy engine.
"""

from __future__ import annotations

import asyncio

import pytest
import requests

from keyless_scraper.config import ScraperConfiguration
from keyless_scraper.robots import (
    RobotsPolicyEngine,
    is_path_allowed,
    matches_pattern,
    parse_robots_txt,
)
from keyless_scraper.types import RobotsTxtRules

ROBOTS_TXT = """
# Example robots file
User-agent: *
Disallow: /private/
Allow: /private/public/
Crawl-delay: 2

User-agent: Googlebot
Disallow: /nogoogle/   # trailing comment

User-agent: SomeBrowser
Disallow: /browser-only/

Sitemap: https://example.com/sitemap.xml
"""


def _config(**overrides: object) -> ScraperConfiguration:
    return ScraperConfiguration.from_credentials({"baseUrl": "https://example.com", **overrides})


class TestParseRobotsTxt:
    def test_collects_wildcard_and_bot_groups(self) -> None:
        rules = parse_robots_txt(ROBOTS_TXT)

        assert rules.disallowed == ["/private/", "/nogoogle/"]
        assert rules.allowed == ["/private/public/"]
        assert rules.crawl_delay_ms == 2000
        assert rules.sitemaps == ["https://example.com/sitemap.xml"]

    def test_ignores_groups_for_other_agents(self) -> None:
        rules = parse_robots_txt(ROBOTS_TXT)
        assert "/browser-only/" not in rules.disallowed

    def test_invalid_crawl_delay_is_ignored(self) -> None:
        rules = parse_robots_txt("User-agent: *\nCrawl-delay: soon\n")
        assert rules.crawl_delay_ms is None

    def test_empty_content(self) -> None:
        rules = parse_robots_txt("")
        assert rules == RobotsTxtRules()


class TestPathMatching:
    @pytest.mark.parametrize(
        ("path", "pattern", "expected"),
        [
            ("/anything", "/", True),
            ("/anything", "", False),
            ("/private/data", "/private/", True),
            ("/public", "/private/", False),
            ("/files/report.pdf", "/files/*.pdf", True),
            ("/files/report.txt", "/files/*.pdf", False),
            ("/a.b", "/a.b", True),
            ("/axb", "/a.b", False),
        ],
    )
    def test_matches_pattern(self, path: str, pattern: str, expected: bool) -> None:
        assert matches_pattern(path, pattern) is expected

    def test_longer_allow_overrides_disallow(self) -> None:
        rules = RobotsTxtRules(allowed=["/private/public/"], disallowed=["/private/"])

        assert is_path_allowed("/private/secret", rules) is False
        assert is_path_allowed("/private/public/page", rules) is True
        assert is_path_allowed("/other", rules) is True

    def test_equal_length_allow_does_not_override(self) -> None:
        rules = RobotsTxtRules(allowed=["/page"], disallowed=["/page"])
        assert is_path_allowed("/page", rules) is False

    def test_disallow_root_blocks_everything(self) -> None:
        rules = RobotsTxtRules(disallowed=["/"])
        assert is_path_allowed("/", rules) is False
        assert is_path_allowed("/deep/path", rules) is False


class TestRobotsPolicyEngine:
    def test_fetch_parses_and_caches_by_origin(self, session, make_response) -> None:
        session.route("https://example.com/robots.txt", make_response(200, ROBOTS_TXT))
        engine = RobotsPolicyEngine(session=session)

        result = asyncio.run(engine.fetch_robots_txt("https://example.com/some/page"))

        assert result.success is True
        assert result.status_code == 200
        assert result.robots_url == "https://example.com/robots.txt"
        assert len(engine) == 1
        call = session.calls_for("https://example.com/robots.txt")[0]
        assert "Googlebot" in call["headers"]["User-Agent"]
        assert call["timeout"] == 10.0

        config = _config()
        assert engine.is_url_allowed("https://example.com/private/data", config) is False
        assert engine.is_url_allowed("https://example.com/private/public/x", config) is True
        assert engine.crawl_delay_ms("https://example.com/") == 2000

    def test_missing_robots_allows_all(self, session) -> None:
        engine = RobotsPolicyEngine(session=session)

        result = asyncio.run(engine.fetch_robots_txt("https://example.com"))

        assert result.success is True
        assert result.status_code == 404
        assert result.rules.allowed == ["/"]
        assert engine.is_url_allowed("https://example.com/anything", _config()) is True

    def test_transport_failure_allows_all_and_reports_failure(self, session) -> None:
        session.route(
            "https://example.com/robots.txt",
            requests.ConnectionError("connection refused"),
        )
        engine = RobotsPolicyEngine(session=session)

        result = asyncio.run(engine.fetch_robots_txt("https://example.com"))

        assert result.success is False
        assert "connection refused" in (result.error or "")
        assert engine.rules_for("https://example.com/x") == RobotsTxtRules.allow_all()

    def test_invalid_url_is_not_fetched(self, session) -> None:
        engine = RobotsPolicyEngine(session=session)

        result = asyncio.run(engine.fetch_robots_txt("not a url"))

        assert result.success is False
        assert session.calls == []
        assert len(engine) == 0

    def test_unfetched_origin_is_allowed(self, session) -> None:
        engine = RobotsPolicyEngine(session=session)
        assert engine.is_url_allowed("https://other.example/private/", _config()) is True

    def test_robots_ignored_when_disabled(self, session, make_response) -> None:
        session.route("https://example.com/robots.txt", make_response(200, "User-agent: *\nDisallow: /\n"))
        engine = RobotsPolicyEngine(session=session)
        asyncio.run(engine.fetch_robots_txt("https://example.com"))

        assert engine.is_url_allowed("https://example.com/page", _config()) is False
        assert engine.is_url_allowed("https://example.com/page", _config(respectRobotsTxt=False)) is True

    def test_origins_are_cached_separately(self, session, make_response) -> None:
        session.route("https://example.com/robots.txt", make_response(200, "User-agent: *\nDisallow: /\n"))
        engine = RobotsPolicyEngine(session=session)
        asyncio.run(engine.fetch_robots_txt("https://example.com"))
        asyncio.run(engine.fetch_robots_txt("https://example.com:8443"))

        assert len(engine) == 2
        assert engine.is_url_allowed("https://example.com:8443/page", _config()) is True

    def test_clear(self, session, make_response) -> None:
        engine = RobotsPolicyEngine(session=session)
        asyncio.run(engine.fetch_robots_txt("https://example.com"))
        engine.clear()
        assert len(engine) == 0
