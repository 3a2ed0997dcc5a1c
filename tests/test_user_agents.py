"""
tests/test_user_agents.py

Unit tests for user-agent lookup and round-robin rotation.
"""

from __future__ import annotations

import pytest

from keyless_scraper.config import ScraperConfiguration
from keyless_scraper.user_agents import ROTATION_POOL, USER_AGENTS, UserAgentRotator


def _config(**overrides: object) -> ScraperConfiguration:
    return ScraperConfiguration.from_credentials({"baseUrl": "https://example.com", **overrides})


class TestUserAgentRotator:
    def test_named_agent_lookup(self) -> None:
        rotator = UserAgentRotator()
        assert rotator.get_user_agent(_config(userAgent="firefox_mac")) == USER_AGENTS["firefox_mac"]

    def test_unknown_agent_falls_back_to_chrome_windows(self) -> None:
        rotator = UserAgentRotator()
        agent = rotator.get_user_agent(_config(userAgent="netscape"))
        assert agent == USER_AGENTS["chrome_windows"]

    def test_custom_agent(self) -> None:
        rotator = UserAgentRotator()
        config = _config(userAgent="custom", customUserAgent="MyCrawler/1.0")
        assert rotator.get_user_agent(config) == "MyCrawler/1.0"

    def test_custom_without_string_falls_back(self) -> None:
        rotator = UserAgentRotator()
        assert rotator.get_user_agent(_config(userAgent="custom")) == USER_AGENTS["chrome_windows"]

    def test_rotation_cycles_through_pool_then_repeats(self) -> None:
        rotator = UserAgentRotator()
        config = _config(rotateUserAgents=True)
        size = len(ROTATION_POOL)

        first_cycle = [rotator.get_user_agent(config) for _ in range(size)]
        second_cycle = [rotator.get_user_agent(config) for _ in range(size)]

        assert len(set(first_cycle)) == size
        assert first_cycle == second_cycle

    def test_rotation_pool_excludes_bots_and_tools(self) -> None:
        assert len(ROTATION_POOL) == 7
        assert all("bot" not in agent.lower() for agent in ROTATION_POOL)
        assert USER_AGENTS["curl"] not in ROTATION_POOL

    def test_rotation_state_is_per_instance(self) -> None:
        config = _config(rotateUserAgents=True)
        first = UserAgentRotator()
        second = UserAgentRotator()
        first.get_user_agent(config)
        assert second.get_user_agent(config) == ROTATION_POOL[0]

    def test_empty_pool_rejected(self) -> None:
        with pytest.raises(ValueError):
            UserAgentRotator(pool=())
