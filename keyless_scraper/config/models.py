"""
Scraping configuration models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from keyless_scraper.errors import ScraperConfigurationError
from keyless_scraper.urls import is_absolute_http_url

ResponseFormat = Literal["html", "json", "text", "binary"]

INVALID_BASE_URL_MESSAGE = "Invalid base URL format."


class ScraperConfiguration(BaseModel):
    """
    Validated configuration for one scrape target.

    Accepts the camelCase credentials bag produced by the storage layer as
    well as snake_case field names. Durations are milliseconds except
    `cache_ttl`, which is seconds.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    base_url: str = Field(alias="baseUrl")
    user_agent: str = Field(default="chrome_windows", alias="userAgent")
    custom_user_agent: str | None = Field(default=None, alias="customUserAgent")
    rotate_user_agents: bool = Field(default=False, alias="rotateUserAgents")
    request_delay: float = Field(default=1000, alias="requestDelay", ge=0)
    respect_robots_txt: bool = Field(default=True, alias="respectRobotsTxt")
    follow_redirects: bool = Field(default=True, alias="followRedirects")
    max_redirects: int = Field(default=5, alias="maxRedirects", ge=0)
    timeout: float = Field(default=30000, gt=0)
    proxy_url: str | None = Field(default=None, alias="proxyUrl")
    custom_headers: str | dict[str, Any] | None = Field(default=None, alias="customHeaders")
    accept_cookies: bool = Field(default=True, alias="acceptCookies")
    cache_responses: bool = Field(default=False, alias="cacheResponses")
    cache_ttl: float = Field(default=300, alias="cacheTtl", ge=0)
    retry_on_failure: bool = Field(default=True, alias="retryOnFailure")
    max_retries: int = Field(default=3, alias="maxRetries", ge=0)
    retry_delay: float = Field(default=2000, alias="retryDelay", ge=0)
    response_format: ResponseFormat = Field(default="html", alias="responseFormat")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        # Form layers send "" or None for untouched optional fields.
        if isinstance(data, Mapping):
            return {
                key: value
                for key, value in data.items()
                if value is not None and not (isinstance(value, str) and not value.strip())
            }
        return data

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not is_absolute_http_url(value):
            raise ValueError(INVALID_BASE_URL_MESSAGE)
        return value

    @model_validator(mode="after")
    def _check_cache_ttl(self) -> "ScraperConfiguration":
        if self.cache_responses and self.cache_ttl <= 0:
            raise ValueError("cacheTtl must be greater than 0 when caching is enabled.")
        return self

    @property
    def effective_max_retries(self) -> int:
        return self.max_retries if self.retry_on_failure else 0

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    @classmethod
    def from_credentials(
        cls,
        credentials: "ScraperConfiguration | Mapping[str, Any]",
    ) -> "ScraperConfiguration":
        """
        Build a configuration from a credentials mapping.

        Raises ScraperConfigurationError listing every invalid field.
        """

        if isinstance(credentials, ScraperConfiguration):
            return credentials
        try:
            return cls.model_validate(dict(credentials))
        except ValidationError as exc:
            field_errors = describe_validation_error(exc)
            message = ", ".join(field_errors.values()) or str(exc)
            raise ScraperConfigurationError(message, field_errors) from exc

    @classmethod
    def from_preset(cls, preset_id: str, **overrides: Any) -> "ScraperConfiguration":
        """
        Build a configuration from a named preset plus explicit overrides.
        """

        preset = SCRAPING_PRESETS.get(preset_id.strip().lower())
        if preset is None:
            allowed = ", ".join(sorted(SCRAPING_PRESETS))
            raise ScraperConfigurationError(
                f"Unknown preset '{preset_id}'. Allowed presets: {allowed}."
            )
        return cls.from_credentials({**preset.as_credentials(), **overrides})


def describe_validation_error(exc: ValidationError) -> dict[str, str]:
    """
    Flatten a pydantic ValidationError into `{field: message}`.
    """

    field_errors: dict[str, str] = {}
    for error in exc.errors():
        location = error.get("loc") or ("__root__",)
        field_name = str(location[0])
        if error.get("type") == "missing":
            message = f"{field_name} is required"
        else:
            message = str(error.get("msg", "invalid value"))
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
        field_errors.setdefault(field_name, message)
    return field_errors


@dataclass(frozen=True)
class ScrapingPreset:
    """
    Named bundle of politeness settings for common scraping scenarios.
    """

    id: str
    name: str
    description: str
    request_delay: int
    rotate_user_agents: bool
    respect_robots_txt: bool = True
    user_agent: str = "chrome_windows"
    notes: str | None = None

    def as_credentials(self) -> dict[str, Any]:
        return {
            "userAgent": self.user_agent,
            "requestDelay": self.request_delay,
            "respectRobotsTxt": self.respect_robots_txt,
            "rotateUserAgents": self.rotate_user_agents,
        }


SCRAPING_PRESETS: dict[str, ScrapingPreset] = {
    preset.id: preset
    for preset in (
        ScrapingPreset(
            id="polite",
            name="Polite Scraper",
            description="Slow, respectful scraping",
            request_delay=3000,
            rotate_user_agents=False,
            notes="Best for sites with strict rate limits. 3 second delay between requests.",
        ),
        ScrapingPreset(
            id="moderate",
            name="Moderate Speed",
            description="Balanced speed and respect",
            request_delay=1000,
            rotate_user_agents=False,
            notes="Good balance for most sites. 1 second delay.",
        ),
        ScrapingPreset(
            id="fast",
            name="Fast Scraper",
            description="Quick data collection",
            request_delay=500,
            rotate_user_agents=True,
            notes="For sites that allow faster access.",
        ),
        ScrapingPreset(
            id="stealth",
            name="Stealth Mode",
            description="Rotate user agents",
            request_delay=2000,
            rotate_user_agents=True,
            notes="Rotates user agents to appear as different browsers.",
        ),
        ScrapingPreset(
            id="research",
            name="Research Mode",
            description="For academic research",
            request_delay=5000,
            rotate_user_agents=False,
            notes="Very conservative. 5 second delay.",
        ),
        ScrapingPreset(
            id="custom",
            name="Custom Settings",
            description="Configure manually",
            request_delay=1000,
            rotate_user_agents=False,
        ),
    )
}


@dataclass(frozen=True)
class ScraperRuntimeSettings:
    """
    Process-level runtime settings for the scraper.
    """

    robots_timeout_seconds: float
    robots_user_agent: str
    default_concurrency: int
    default_preset: str
    log_level: str
