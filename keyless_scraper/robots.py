"""
robots.txt policy engine for scraper compliance.
"""

from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import urlsplit

import requests

from keyless_scraper.config.models import ScraperConfiguration
from keyless_scraper.logging_utils import log_event
from keyless_scraper.types import RobotsFetchResult, RobotsTxtRules
from keyless_scraper.urls import origin_of
from keyless_scraper.user_agents import CRAWLER_USER_AGENT

logger = logging.getLogger(__name__)


def parse_robots_txt(content: str) -> RobotsTxtRules:
    """
    Collect the directives of every group addressed to `*` or to any bot.

    Sitemap lines are collected regardless of the group they appear in.
    """

    rules = RobotsTxtRules()
    relevant = False

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if ":" not in line:
            continue

        directive, value = line.split(":", 1)
        directive = directive.strip().lower()
        value = value.split("#", 1)[0].strip() if directive != "sitemap" else value.strip()

        if directive == "user-agent":
            agent = value.lower()
            relevant = agent == "*" or "bot" in agent
        elif directive == "sitemap":
            if value:
                rules.sitemaps.append(value)
        elif relevant:
            if directive == "allow":
                rules.allowed.append(value)
            elif directive == "disallow":
                rules.disallowed.append(value)
            elif directive == "crawl-delay":
                try:
                    rules.crawl_delay_ms = float(value) * 1000.0
                except ValueError:
                    continue

    return rules


def matches_pattern(path: str, pattern: str) -> bool:
    """
    Match a URL path against a robots.txt path pattern (`*` wildcard).
    """

    if not pattern:
        return False
    if pattern == "/":
        return True
    regex = re.escape(pattern).replace(r"\*", ".*")
    return re.match(regex, path) is not None


def _longest_match(path: str, patterns: list[str]) -> str | None:
    matched = [pattern for pattern in patterns if matches_pattern(path, pattern)]
    if not matched:
        return None
    return max(matched, key=len)


def is_path_allowed(path: str, rules: RobotsTxtRules) -> bool:
    """
    Longest match wins; an Allow must be strictly longer to beat a Disallow.
    """

    disallow = _longest_match(path, rules.disallowed)
    if disallow is None:
        return True
    allow = _longest_match(path, rules.allowed)
    return allow is not None and len(allow) > len(disallow)


class RobotsPolicyEngine:
    """
    Fetches robots.txt per origin and answers allow/deny checks.

    Rules are cached for the lifetime of the engine; refreshing an origin
    requires another explicit `fetch_robots_txt` call.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        timeout_seconds: float = 10.0,
        user_agent: str = CRAWLER_USER_AGENT,
    ) -> None:
        self._session = session
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._cache: dict[str, RobotsTxtRules] = {}

    def __len__(self) -> int:
        return len(self._cache)

    async def fetch_robots_txt(self, base_url: str) -> RobotsFetchResult:
        """
        Fetch, parse and cache robots.txt for the origin of `base_url`.

        A missing robots.txt (any non-2xx status) means allow all. A transport
        failure also yields allow-all rules but reports `success=False`.
        """

        try:
            origin = origin_of(base_url)
        except ValueError as exc:
            return RobotsFetchResult(
                success=False,
                rules=RobotsTxtRules.allow_all(),
                error=str(exc),
            )

        robots_url = f"{origin}/robots.txt"
        try:
            response = await asyncio.to_thread(
                self._session.get,
                robots_url,
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            rules = RobotsTxtRules.allow_all()
            self._cache[origin] = rules
            log_event(
                logger,
                logging.WARNING,
                "robots_fetch_failed",
                origin=origin,
                robots_url=robots_url,
                error=str(exc),
            )
            return RobotsFetchResult(
                success=False,
                rules=rules,
                robots_url=robots_url,
                error=str(exc),
            )

        if 200 <= response.status_code < 300:
            rules = parse_robots_txt(response.text)
            log_event(
                logger,
                logging.INFO,
                "robots_loaded",
                origin=origin,
                robots_url=robots_url,
                allowed=len(rules.allowed),
                disallowed=len(rules.disallowed),
                crawl_delay_ms=rules.crawl_delay_ms,
            )
        else:
            rules = RobotsTxtRules.allow_all()
            log_event(
                logger,
                logging.INFO,
                "robots_unavailable",
                origin=origin,
                robots_url=robots_url,
                status_code=response.status_code,
            )

        self._cache[origin] = rules
        return RobotsFetchResult(
            success=True,
            rules=rules,
            robots_url=robots_url,
            status_code=response.status_code,
        )

    def rules_for(self, url: str) -> RobotsTxtRules | None:
        try:
            return self._cache.get(origin_of(url))
        except ValueError:
            return None

    def crawl_delay_ms(self, url: str) -> float | None:
        rules = self.rules_for(url)
        return rules.crawl_delay_ms if rules is not None else None

    def is_url_allowed(self, url: str, config: ScraperConfiguration) -> bool:
        """
        Return whether `url` may be fetched. Origins without fetched rules
        are allowed.
        """

        if not config.respect_robots_txt:
            return True

        rules = self.rules_for(url)
        if rules is None:
            return True
        try:
            path = urlsplit(url).path or "/"
        except ValueError:
            return True
        return is_path_allowed(path, rules)

    def clear(self) -> None:
        self._cache.clear()
