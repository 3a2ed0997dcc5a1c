"""
Extraction engine factory.
"""

from __future__ import annotations

from typing import Literal

from keyless_scraper.parsing.html_parsers import HtmlExtractionEngine
from keyless_scraper.parsing.soup_engine import SoupExtractionEngine

ExtractionBackend = Literal["regex", "soup"]

ENGINE_BACKENDS: dict[str, type[HtmlExtractionEngine]] = {
    "regex": HtmlExtractionEngine,
    "soup": SoupExtractionEngine,
}


def create_extraction_engine(
    html: str,
    base_url: str = "",
    *,
    backend: ExtractionBackend = "regex",
) -> HtmlExtractionEngine:
    engine_class = ENGINE_BACKENDS.get(backend.strip().lower())
    if engine_class is None:
        allowed = ", ".join(sorted(ENGINE_BACKENDS))
        raise ValueError(f"Unsupported extraction backend '{backend}'. Allowed backends: {allowed}.")
    return engine_class(html, base_url)
