"""
Environment loader for keyless scraper runtime settings.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from keyless_scraper.config.models import SCRAPING_PRESETS, ScraperRuntimeSettings
from keyless_scraper.user_agents import CRAWLER_USER_AGENT


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    roots: list[Path] = []
    for root in (Path.cwd(), _project_root()):
        if root not in roots:
            roots.append(root)

    for root in roots:
        for filename in (".env", ".env.local"):
            env_path = root / filename
            if not env_path.exists():
                continue

            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


@lru_cache(maxsize=1)
def get_scraper_runtime_settings() -> ScraperRuntimeSettings:
    """
    Return cached scraper runtime settings from environment variables.
    """

    load_env_files()
    default_preset = _get_str_env("KEYLESS_SCRAPER_DEFAULT_PRESET", "moderate").lower()
    if default_preset not in SCRAPING_PRESETS:
        default_preset = "moderate"

    return ScraperRuntimeSettings(
        robots_timeout_seconds=max(
            1.0,
            _get_float_env("KEYLESS_SCRAPER_ROBOTS_TIMEOUT_SECONDS", 10.0),
        ),
        robots_user_agent=_get_str_env("KEYLESS_SCRAPER_ROBOTS_USER_AGENT", CRAWLER_USER_AGENT),
        default_concurrency=max(
            1,
            _get_int_env("KEYLESS_SCRAPER_DEFAULT_CONCURRENCY", 1),
        ),
        default_preset=default_preset,
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
