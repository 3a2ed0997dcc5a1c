"""
Shared fixtures: a stub requests session, a fake clock and sleep recorders.

No test performs real network I/O or real sleeping.
"""

from __future__ import annotations

from typing import Any

import pytest
import requests

from keyless_scraper.cache import ResponseCache
from keyless_scraper.config import ScraperRuntimeSettings
from keyless_scraper.executor import KeylessScraperExecutor
from keyless_scraper.rate_limiter import RateLimiter
from keyless_scraper.user_agents import CRAWLER_USER_AGENT

BASE_URL = "https://example.com"


def build_response(
    status_code: int = 200,
    body: str | bytes = "",
    headers: dict[str, str] | None = None,
    url: str = BASE_URL,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    response.url = url
    return response


class StubSession:
    """
    Stands in for requests.Session. Each URL maps to a queue of outcomes
    (responses or exceptions); the last outcome repeats once the queue drains.
    Unrouted URLs answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[Any]] = {}
        self.calls: list[dict[str, Any]] = []
        self.max_redirects = requests.models.DEFAULT_REDIRECT_LIMIT

    def route(self, url: str, *outcomes: requests.Response | BaseException) -> None:
        self.routes[url] = list(outcomes)

    def calls_for(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, "max_redirects": self.max_redirects, **kwargs})
        queue = self.routes.get(url)
        if not queue:
            return build_response(404, url=url)
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Async sleep replacement that records durations and advances a clock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.calls: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds)


@pytest.fixture()
def make_response():
    return build_response


@pytest.fixture()
def session() -> StubSession:
    return StubSession()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def rate_sleeps(clock: FakeClock) -> SleepRecorder:
    return SleepRecorder(clock)


@pytest.fixture()
def retry_sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def settings() -> ScraperRuntimeSettings:
    return ScraperRuntimeSettings(
        robots_timeout_seconds=10.0,
        robots_user_agent=CRAWLER_USER_AGENT,
        default_concurrency=1,
        default_preset="moderate",
        log_level="INFO",
    )


@pytest.fixture()
def executor(
    session: StubSession,
    settings: ScraperRuntimeSettings,
    clock: FakeClock,
    rate_sleeps: SleepRecorder,
    retry_sleeps: SleepRecorder,
) -> KeylessScraperExecutor:
    return KeylessScraperExecutor(
        session=session,
        settings=settings,
        cache=ResponseCache(clock=clock),
        rate_limiter=RateLimiter(clock=clock, sleep=rate_sleeps),
        sleep=retry_sleeps,
    )
