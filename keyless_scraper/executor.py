"""
Keyless scraper protocol module.

Fetches publicly accessible pages without credentials while staying polite:
robots.txt compliance, a minimum inter-request delay, browser-like
identification headers, an optional response cache and a cookie jar.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from http.cookiejar import DefaultCookiePolicy
from typing import Any
from urllib.parse import urlsplit

import requests
from requests.cookies import RequestsCookieJar

from keyless_scraper.cache import ResponseCache
from keyless_scraper.config import ScraperConfiguration, ScraperRuntimeSettings, get_scraper_runtime_settings
from keyless_scraper.config.models import INVALID_BASE_URL_MESSAGE
from keyless_scraper.cookies import CookieJar
from keyless_scraper.errors import ScraperConfigurationError, ScraperError, ScraperNotConfiguredError
from keyless_scraper.logging_utils import log_event
from keyless_scraper.protocol import Credentials, ProtocolMetadata, ProtocolModule
from keyless_scraper.rate_limiter import RateLimiter
from keyless_scraper.robots import RobotsPolicyEngine
from keyless_scraper.types import (
    NETWORK_ERROR,
    ROBOTS_BLOCKED,
    AuthenticationFlow,
    CredentialValidationResult,
    ExecutionContext,
    ExecutionResult,
    HealthCheckResult,
    RevocationResult,
    TokenRefreshResult,
)
from keyless_scraper.urls import resolve_url, with_query
from keyless_scraper.user_agents import USER_AGENTS, UserAgentRotator

logger = logging.getLogger(__name__)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

CACHE_LOOKUP_METHODS = {"GET", "HEAD"}
CACHE_STORE_METHODS = {"GET"}

PERMISSION_WARNINGS = (
    "Ensure you have permission to scrape the target website",
    "Respect robots.txt and rate limits",
)


def _isolated_session() -> requests.Session:
    session = requests.Session()
    # The executor's CookieJar is the only cookie store; the session keeps none.
    session.cookies = RequestsCookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    return session


def _describe_transport_error(exc: BaseException, config: ScraperConfiguration) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return f"Request timed out after {config.timeout:g} ms"
    return str(exc) or exc.__class__.__name__


class KeylessScraperExecutor(ProtocolModule):
    """
    Politeness-aware HTTP client for public web content.

    One instance owns its robots cache, response cache, cookie jar,
    user-agent rotation index and rate-limit timer. Instances are not meant
    to be shared across event loops or threads.
    """

    protocol_type = "keyless-scraper"

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        settings: ScraperRuntimeSettings | None = None,
        rotator: UserAgentRotator | None = None,
        cookie_jar: CookieJar | None = None,
        cache: ResponseCache | None = None,
        robots_policy: RobotsPolicyEngine | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._settings = settings or get_scraper_runtime_settings()
        self._session = session or _isolated_session()
        self._rotator = rotator or UserAgentRotator()
        self._cookies = cookie_jar or CookieJar()
        self._cache = cache or ResponseCache()
        self._robots = robots_policy or RobotsPolicyEngine(
            session=self._session,
            timeout_seconds=self._settings.robots_timeout_seconds,
            user_agent=self._settings.robots_user_agent,
        )
        self._rate_limiter = rate_limiter or RateLimiter()
        self._sleep = sleep
        self._clock = clock
        self._configuration: ScraperConfiguration | None = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def configuration(self) -> ScraperConfiguration:
        if self._configuration is None:
            raise ScraperNotConfiguredError(
                "No scraper configuration is bound. Call authenticate() first "
                "or pass credentials explicitly."
            )
        return self._configuration

    @property
    def is_authenticated(self) -> bool:
        return self._configuration is not None

    @property
    def robots_policy(self) -> RobotsPolicyEngine:
        return self._robots

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def cookies(self) -> CookieJar:
        return self._cookies

    def clear_cache(self) -> None:
        self._cache.clear()

    def clear_cookies(self) -> None:
        self._cookies.clear()

    def get_metadata(self) -> ProtocolMetadata:
        return ProtocolMetadata(
            type="scraper",
            display_name="Keyless Scraper",
            description="Web scraping for publicly accessible content without authentication.",
            version="1.0.0",
            capabilities={
                "supports_redirect_flow": False,
                "supports_token_refresh": False,
                "supports_token_revocation": False,
                "supports_scopes": False,
                "supports_offline_access": True,
                "requires_server_side": False,
                "supports_auto_injection": True,
            },
            use_cases=[
                "Public data extraction",
                "Price monitoring",
                "Content aggregation",
                "SEO analysis",
                "Research data collection",
            ],
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def validate_credentials(self, credentials: Credentials) -> CredentialValidationResult:
        _, result = self._validate(credentials)
        return result

    def _validate(
        self,
        credentials: Credentials,
    ) -> tuple[ScraperConfiguration | None, CredentialValidationResult]:
        warnings = list(PERMISSION_WARNINGS)
        try:
            config = ScraperConfiguration.from_credentials(credentials)
        except ScraperConfigurationError as exc:
            return None, CredentialValidationResult(
                valid=False,
                field_errors=exc.field_errors or {"__root__": str(exc)},
                warnings=warnings,
            )

        if config.user_agent not in USER_AGENTS and config.user_agent != "custom":
            warnings.append(
                f"Unknown user agent '{config.user_agent}', falling back to chrome_windows"
            )
        if config.user_agent == "custom":
            agent = config.custom_user_agent or ""
        else:
            agent = USER_AGENTS.get(config.user_agent, "")
        if "bot" in agent.lower():
            warnings.append("User-Agent identifies as a bot - some sites may block this")
        if config.proxy_url:
            warnings.append("Requests are routed through the configured proxy")
        return config, CredentialValidationResult(valid=True, warnings=warnings)

    async def authenticate(self, credentials: Credentials) -> AuthenticationFlow:
        """
        Validate and bind a configuration, prefetching robots.txt when enabled.
        """

        config, validation = self._validate(credentials)
        if config is None:
            error = ", ".join(validation.field_errors.values())
            invalid_url = validation.field_errors.get("baseUrl") == INVALID_BASE_URL_MESSAGE
            log_event(
                logger,
                logging.WARNING,
                "authenticate_failed",
                field_errors=validation.field_errors,
            )
            return AuthenticationFlow(
                type="error",
                title="Invalid URL" if invalid_url else "Configuration Error",
                description=(
                    "Please provide a valid URL."
                    if invalid_url
                    else "Please fix the configuration errors."
                ),
                error=error,
            )

        robots_fetched: bool | None = None
        if config.respect_robots_txt:
            robots_result = await self._robots.fetch_robots_txt(config.base_url)
            robots_fetched = robots_result.success

        self._configuration = config
        hostname = urlsplit(config.base_url).hostname
        log_event(
            logger,
            logging.INFO,
            "scraper_authenticated",
            base_url=config.base_url,
            respect_robots_txt=config.respect_robots_txt,
            robots_fetched=robots_fetched,
        )
        return AuthenticationFlow(
            type="complete",
            title="Scraper Configured",
            description=f"Ready to scrape {hostname}",
            data={
                "base_url": config.base_url,
                "respect_robots_txt": config.respect_robots_txt,
                "robots_fetched": robots_fetched,
                "warnings": validation.warnings,
            },
        )

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------

    def build_request_headers(self, config: ScraperConfiguration) -> dict[str, str]:
        """
        Browser-like headers plus User-Agent, Cookie and custom headers.
        """

        headers = {"User-Agent": self._rotator.get_user_agent(config), **BROWSER_HEADERS}
        if config.accept_cookies and len(self._cookies) > 0:
            headers["Cookie"] = self._cookies.get_cookie_header()
        headers.update(self._parse_custom_headers(config.custom_headers))
        return headers

    @staticmethod
    def _parse_custom_headers(raw: str | Mapping[str, Any] | None) -> dict[str, str]:
        if raw is None:
            return {}
        parsed: Any = raw
        if isinstance(raw, str):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError as exc:
                log_event(logger, logging.WARNING, "custom_headers_invalid", error=str(exc))
                return {}
        if not isinstance(parsed, Mapping):
            log_event(
                logger,
                logging.WARNING,
                "custom_headers_invalid",
                error=f"expected a JSON object, got {type(parsed).__name__}",
            )
            return {}
        return {str(key): str(value) for key, value in parsed.items()}

    def _resolve_configuration(self, credentials: Credentials | None) -> ScraperConfiguration:
        if credentials is None:
            return self.configuration
        return ScraperConfiguration.from_credentials(credentials)

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock() - started) * 1000.0

    @staticmethod
    def _format_body(config: ScraperConfiguration, text: str, content: bytes) -> Any:
        if config.response_format == "binary":
            return content
        if config.response_format == "json" and text:
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return text
        return text

    async def execute_request(self, context: ExecutionContext) -> ExecutionResult:
        """
        Run one request through robots, cache, rate-limit and retry stages.

        Only transport errors and timeouts are retried, with linear backoff
        (`retry_delay * attempt`). HTTP error statuses and exceeding the
        redirect limit return immediately. Query parameters are part of the
        URL used for robots checks and cache keys.
        """

        started = self._clock()
        config = self._resolve_configuration(context.credentials)
        method = context.method.upper()
        url = with_query(resolve_url(context.url, config.base_url), context.query_params)

        if not self._robots.is_url_allowed(url, config):
            log_event(logger, logging.WARNING, "request_blocked_by_robots", url=url)
            return ExecutionResult(
                success=False,
                status_code=403,
                headers={},
                body=None,
                raw_body="",
                duration_ms=self._elapsed_ms(started),
                error="URL blocked by robots.txt",
                error_code=ROBOTS_BLOCKED,
            )

        if method in CACHE_LOOKUP_METHODS:
            cached = self._cache.get(url, config)
            if cached is not None:
                log_event(logger, logging.DEBUG, "cache_hit", url=url, method=method)
                bodiless = method == "HEAD"
                return ExecutionResult(
                    success=True,
                    status_code=cached.status_code,
                    headers={**cached.headers, "x-cache": "HIT"},
                    body=None if bodiless else self._format_body(config, cached.body, cached.content),
                    raw_body="" if bodiless else cached.body,
                    duration_ms=self._elapsed_ms(started),
                )

        crawl_delay_ms = self._robots.crawl_delay_ms(url) if config.respect_robots_txt else None
        await self._rate_limiter.wait_for_rate_limit(config, crawl_delay_ms=crawl_delay_ms)

        headers = {**self.build_request_headers(config), **context.headers}
        attempts = config.effective_max_retries + 1
        last_error = "Request failed after retries"

        for attempt in range(1, attempts + 1):
            try:
                response = await self._send(method, url, headers, context, config)
            except requests.TooManyRedirects as exc:
                last_error = _describe_transport_error(exc, config)
                log_event(
                    logger,
                    logging.WARNING,
                    "request_attempt_failed",
                    url=url,
                    method=method,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=last_error,
                )
                attempts = attempt
                break
            except (requests.RequestException, asyncio.TimeoutError) as exc:
                last_error = _describe_transport_error(exc, config)
                log_event(
                    logger,
                    logging.WARNING,
                    "request_attempt_failed",
                    url=url,
                    method=method,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=last_error,
                )
                if attempt < attempts:
                    await self._sleep(config.retry_delay * attempt / 1000.0)
                continue

            return self._build_result(response, url, method, config, started)

        log_event(
            logger,
            logging.ERROR,
            "request_failed",
            url=url,
            method=method,
            attempts=attempts,
            error=last_error,
        )
        return ExecutionResult(
            success=False,
            status_code=0,
            headers={},
            body=None,
            raw_body="",
            duration_ms=self._elapsed_ms(started),
            error=last_error,
            error_code=NETWORK_ERROR,
        )

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        context: ExecutionContext,
        config: ScraperConfiguration,
    ) -> requests.Response:
        kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": config.timeout_seconds,
            "allow_redirects": config.follow_redirects,
        }
        if config.proxy_url:
            kwargs["proxies"] = {"http": config.proxy_url, "https": config.proxy_url}
        if isinstance(context.body, (str, bytes)):
            kwargs["data"] = context.body
        elif context.body is not None:
            kwargs["json"] = dict(context.body)

        # Redirect budget is per configuration, not per session.
        self._session.max_redirects = config.max_redirects

        return await asyncio.wait_for(
            asyncio.to_thread(self._session.request, method, url, **kwargs),
            timeout=config.timeout_seconds,
        )

    def _build_result(
        self,
        response: requests.Response,
        url: str,
        method: str,
        config: ScraperConfiguration,
        started: float,
    ) -> ExecutionResult:
        text = response.text
        headers = {key.lower(): value for key, value in response.headers.items()}
        success = 200 <= response.status_code < 300

        if config.accept_cookies:
            self._cookies.parse_cookies(response.headers.get("Set-Cookie"))
        if success and method in CACHE_STORE_METHODS:
            self._cache.put(
                url,
                text,
                headers,
                response.status_code,
                config,
                content=response.content,
            )

        log_event(
            logger,
            logging.INFO if success else logging.WARNING,
            "request_completed",
            url=url,
            method=method,
            status_code=response.status_code,
            body_length=len(text),
        )
        return ExecutionResult(
            success=success,
            status_code=response.status_code,
            headers=headers,
            body=self._format_body(config, text, response.content or b""),
            raw_body=text,
            duration_ms=self._elapsed_ms(started),
            error=None if success else f"HTTP {response.status_code}",
        )

    async def scrape_multiple(
        self,
        credentials: Credentials | None,
        urls: Sequence[str],
        *,
        concurrency: int | None = None,
    ) -> dict[str, ExecutionResult]:
        """
        Fetch many URLs, sequentially or in joined chunks of `concurrency`.

        Every request still passes through the shared rate limiter.
        """

        config = self._resolve_configuration(credentials)
        limit = max(1, concurrency if concurrency is not None else self._settings.default_concurrency)
        results: dict[str, ExecutionResult] = {}

        if limit == 1:
            for url in urls:
                results[url] = await self.execute_request(
                    ExecutionContext(url=url, credentials=config)
                )
            return results

        for start in range(0, len(urls), limit):
            chunk = list(urls[start:start + limit])
            chunk_results = await asyncio.gather(
                *(
                    self.execute_request(ExecutionContext(url=url, credentials=config))
                    for url in chunk
                )
            )
            for url, result in zip(chunk, chunk_results):
                results[url] = result
        return results

    # ------------------------------------------------------------------
    # Health and token lifecycle
    # ------------------------------------------------------------------

    async def health_check(self, credentials: Credentials | None = None) -> HealthCheckResult:
        started = self._clock()
        try:
            config = self._resolve_configuration(credentials)
        except ScraperError as exc:
            return HealthCheckResult(
                healthy=False,
                message=str(exc),
                latency_ms=self._elapsed_ms(started),
                token_status="unknown",
                token_expires_in=0,
                can_refresh=False,
            )

        result = await self.execute_request(
            ExecutionContext(url=config.base_url, method="HEAD", credentials=config)
        )
        if result.success:
            message = f"Website reachable ({result.status_code})"
        elif result.error_code is not None:
            message = result.error or result.error_code
        else:
            message = f"Website returned {result.status_code}"

        return HealthCheckResult(
            healthy=result.success,
            message=message,
            latency_ms=self._elapsed_ms(started),
            token_status="valid",
            token_expires_in=-1,
            can_refresh=False,
            details={
                "status_code": result.status_code,
                "error_code": result.error_code,
                "cache_size": len(self._cache),
                "cookie_count": len(self._cookies),
                "robots_origins": len(self._robots),
            },
        )

    async def refresh_tokens(self, credentials: Credentials | None = None) -> TokenRefreshResult:
        return TokenRefreshResult(success=True)

    async def revoke_tokens(self, credentials: Credentials | None = None) -> RevocationResult:
        self.clear_cache()
        self.clear_cookies()
        return RevocationResult(success=True)

    def is_token_expired(self, credentials: Credentials | None = None) -> bool:
        return False
