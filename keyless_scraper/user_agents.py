"""
Browser identification strings and per-instance user-agent rotation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from keyless_scraper.config.models import ScraperConfiguration

USER_AGENTS: dict[str, str] = {
    "chrome_windows": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "chrome_mac": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "chrome_linux": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "firefox_windows": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "firefox_mac": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0",
    "safari_mac": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.2 Safari/605.1.15"
    ),
    "edge_windows": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
    ),
    "googlebot": "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
    "bingbot": "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
    "curl": "curl/8.4.0",
}

DEFAULT_USER_AGENT_ID = "chrome_windows"
CUSTOM_USER_AGENT_ID = "custom"
CRAWLER_USER_AGENT = USER_AGENTS["googlebot"]

# Desktop browsers only; crawler and tool identifiers are never rotated in.
ROTATION_POOL: tuple[str, ...] = tuple(
    agent
    for agent in USER_AGENTS.values()
    if "bot" not in agent.lower() and not agent.lower().startswith("curl")
)


class UserAgentRotator:
    """
    Supplies a User-Agent per request, round-robin when rotation is enabled.
    """

    def __init__(self, pool: Sequence[str] = ROTATION_POOL) -> None:
        if not pool:
            raise ValueError("User-agent pool must not be empty.")
        self._pool = tuple(pool)
        self._index = 0

    @property
    def pool(self) -> tuple[str, ...]:
        return self._pool

    def get_user_agent(self, config: ScraperConfiguration) -> str:
        if config.rotate_user_agents:
            agent = self._pool[self._index]
            self._index = (self._index + 1) % len(self._pool)
            return agent

        if config.user_agent == CUSTOM_USER_AGENT_ID:
            return config.custom_user_agent or USER_AGENTS[DEFAULT_USER_AGENT_ID]
        return USER_AGENTS.get(config.user_agent, USER_AGENTS[DEFAULT_USER_AGENT_ID])
