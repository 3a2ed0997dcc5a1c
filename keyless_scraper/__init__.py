"""
Keyless scraping protocol module: polite, credential-free HTTP access to
public web content plus HTML extraction helpers.
"""

from keyless_scraper.config import SCRAPING_PRESETS, ScraperConfiguration, ScrapingPreset
from keyless_scraper.errors import (
    ScraperConfigurationError,
    ScraperError,
    ScraperNotConfiguredError,
    UnknownProtocolError,
)
from keyless_scraper.executor import KeylessScraperExecutor
from keyless_scraper.parsing import (
    HtmlExtractionEngine,
    SoupExtractionEngine,
    create_extraction_engine,
    extract_links,
    extract_text,
)
from keyless_scraper.protocol import ProtocolMetadata, ProtocolModule
from keyless_scraper.registry import ProtocolRegistry
from keyless_scraper.types import (
    NETWORK_ERROR,
    ROBOTS_BLOCKED,
    AuthenticationFlow,
    ExecutionContext,
    ExecutionResult,
)

__all__ = [
    "NETWORK_ERROR",
    "ROBOTS_BLOCKED",
    "SCRAPING_PRESETS",
    "AuthenticationFlow",
    "ExecutionContext",
    "ExecutionResult",
    "HtmlExtractionEngine",
    "KeylessScraperExecutor",
    "ProtocolMetadata",
    "ProtocolModule",
    "ProtocolRegistry",
    "ScraperConfiguration",
    "ScraperConfigurationError",
    "ScraperError",
    "ScraperNotConfiguredError",
    "ScrapingPreset",
    "SoupExtractionEngine",
    "UnknownProtocolError",
    "create_extraction_engine",
    "extract_links",
    "extract_text",
]
