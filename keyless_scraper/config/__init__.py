"""
Config helpers for the keyless scraper.
"""

from keyless_scraper.config.loader import get_scraper_runtime_settings, load_env_files
from keyless_scraper.config.models import (
    SCRAPING_PRESETS,
    ScraperConfiguration,
    ScraperRuntimeSettings,
    ScrapingPreset,
)

__all__ = [
    "SCRAPING_PRESETS",
    "ScraperConfiguration",
    "ScraperRuntimeSettings",
    "ScrapingPreset",
    "get_scraper_runtime_settings",
    "load_env_files",
]
