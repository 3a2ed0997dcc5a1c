"""
Shared scraping runtime data models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from keyless_scraper.config.models import ScraperConfiguration

ROBOTS_BLOCKED = "ROBOTS_BLOCKED"
NETWORK_ERROR = "NETWORK_ERROR"


@dataclass
class RobotsTxtRules:
    """
    robots.txt directives that apply to this scraper for one origin.
    """

    allowed: list[str] = field(default_factory=list)
    disallowed: list[str] = field(default_factory=list)
    sitemaps: list[str] = field(default_factory=list)
    crawl_delay_ms: float | None = None

    @classmethod
    def allow_all(cls) -> "RobotsTxtRules":
        return cls(allowed=["/"])


@dataclass(frozen=True)
class RobotsFetchResult:
    """
    Outcome of one robots.txt fetch. `rules` is always populated.
    """

    success: bool
    rules: RobotsTxtRules
    robots_url: str | None = None
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class CachedResponse:
    body: str
    headers: dict[str, str]
    status_code: int
    timestamp: float
    ttl: float
    content: bytes = b""

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp <= self.ttl


@dataclass(frozen=True)
class ExecutionContext:
    """
    One request to run through the executor pipeline.

    `credentials` overrides the configuration bound by `authenticate` for this
    call only.
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | bytes | Mapping[str, Any] | None = None
    query_params: dict[str, str] = field(default_factory=dict)
    credentials: ScraperConfiguration | Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome for one executor request.
    """

    success: bool
    status_code: int
    headers: dict[str, str]
    body: Any
    raw_body: str
    duration_ms: float
    credentials_refreshed: bool = False
    error: str | None = None
    error_code: str | None = None

    @property
    def from_cache(self) -> bool:
        return self.headers.get("x-cache") == "HIT"


@dataclass(frozen=True)
class AuthenticationFlow:
    """
    Single-step authentication outcome; keyless access never needs more steps.
    """

    type: Literal["complete", "error"]
    title: str
    description: str
    step: int = 1
    total_steps: int = 1
    error: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HealthCheckResult:
    healthy: bool
    message: str
    latency_ms: float
    token_status: str
    token_expires_in: int
    can_refresh: bool
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TokenRefreshResult:
    success: bool
    access_token: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RevocationResult:
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class CredentialValidationResult:
    """
    Field-level validation outcome for a credentials mapping.
    """

    valid: bool
    field_errors: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
