"""
tests/test_registry.py

Unit tests for ProtocolRegistry lookup and dynamic class loading.
"""

from __future__ import annotations

import pytest

from keyless_scraper.errors import UnknownProtocolError
from keyless_scraper.executor import KeylessScraperExecutor
from keyless_scraper.registry import ProtocolRegistry


def test_builtin_protocol_is_registered() -> None:
    registry = ProtocolRegistry()

    assert registry.protocol_types == ["keyless-scraper"]
    assert registry.resolve(" Keyless-Scraper ") is KeylessScraperExecutor


def test_create_module_passes_constructor_arguments(session, settings) -> None:
    module = ProtocolRegistry().create_module("keyless-scraper", session=session, settings=settings)

    assert isinstance(module, KeylessScraperExecutor)
    assert module.is_authenticated is False


def test_dynamic_import_path() -> None:
    registry = ProtocolRegistry()
    assert registry.resolve("keyless_scraper.executor:KeylessScraperExecutor") is KeylessScraperExecutor


def test_register_additional_protocol() -> None:
    class MirrorScraper(KeylessScraperExecutor):
        protocol_type = "mirror-scraper"

    registry = ProtocolRegistry()
    registry.register(protocol_type="Mirror-Scraper", module_class=MirrorScraper)

    assert registry.protocol_types == ["keyless-scraper", "mirror-scraper"]
    assert registry.resolve("mirror-scraper") is MirrorScraper


def test_unknown_protocol_lists_allowed_values() -> None:
    with pytest.raises(UnknownProtocolError, match="Allowed protocols: keyless-scraper"):
        ProtocolRegistry().resolve("oauth2")


@pytest.mark.parametrize(
    "path",
    [
        "keyless_scraper.missing_module:Scraper",
        "keyless_scraper.executor:MissingClass",
        "keyless_scraper.cookies:CookieJar",
    ],
)
def test_invalid_dynamic_paths_raise(path: str) -> None:
    with pytest.raises(UnknownProtocolError):
        ProtocolRegistry().resolve(path)
