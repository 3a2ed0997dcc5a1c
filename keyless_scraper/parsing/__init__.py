from keyless_scraper.parsing.factory import ENGINE_BACKENDS, create_extraction_engine
from keyless_scraper.parsing.html_parsers import HtmlExtractionEngine, extract_links, parse_attributes
from keyless_scraper.parsing.models import (
    ExtractedElement,
    Heading,
    ImageInfo,
    LinkInfo,
    ListBlock,
    MetaInfo,
    SelectorResult,
    StructuredText,
    TableData,
)
from keyless_scraper.parsing.soup_engine import SoupExtractionEngine
from keyless_scraper.parsing.text import decode_html_entities, extract_text

__all__ = [
    "ENGINE_BACKENDS",
    "ExtractedElement",
    "Heading",
    "HtmlExtractionEngine",
    "ImageInfo",
    "LinkInfo",
    "ListBlock",
    "MetaInfo",
    "SelectorResult",
    "SoupExtractionEngine",
    "StructuredText",
    "TableData",
    "create_extraction_engine",
    "decode_html_entities",
    "extract_links",
    "extract_text",
    "parse_attributes",
]
