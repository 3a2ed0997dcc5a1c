"""
Exceptions raised by the keyless scraper.

Runtime failures (robots denial, transport errors, HTTP errors) are reported
through result objects; the exceptions below signal programming errors.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base exception for keyless scraper failures."""


class ScraperNotConfiguredError(ScraperError):
    """Raised when an operation needs a configuration and none is bound."""


class ScraperConfigurationError(ScraperError, ValueError):
    """
    Raised when a credentials mapping cannot be turned into a configuration.
    """

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class UnknownProtocolError(ScraperError, ValueError):
    """Raised when a protocol type cannot be resolved to a module class."""
