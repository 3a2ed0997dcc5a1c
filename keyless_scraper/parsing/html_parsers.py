"""
Regex-based extraction engine for scraped HTML documents.

The engine never builds a tree, so nested elements of the same tag close at
the first matching end tag.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from typing import Any
from urllib.parse import urljoin

from keyless_scraper.logging_utils import log_event
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
from keyless_scraper.parsing.text import decode_html_entities, extract_text, fragment_text
from keyless_scraper.urls import origin_of

logger = logging.getLogger(__name__)

ATTRIBUTE_REGEX = re.compile(
    r"""([A-Za-z_:][\w:.-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)
ANY_TAG = r"[a-z][a-z0-9]*"
TITLE_REGEX = re.compile(r"<title\b[^>]*>([\s\S]*?)</title\s*>", flags=re.IGNORECASE)
META_REGEX = re.compile(r"<meta\b([^>]*)>", flags=re.IGNORECASE)
LINK_TAG_REGEX = re.compile(r"<link\b([^>]*)>", flags=re.IGNORECASE)
ANCHOR_REGEX = re.compile(r"<a\b([^>]*)>([\s\S]*?)</a\s*>", flags=re.IGNORECASE)
IMAGE_REGEX = re.compile(r"<img\b([^>]*)>", flags=re.IGNORECASE)
TABLE_REGEX = re.compile(r"<table\b[^>]*>([\s\S]*?)</table\s*>", flags=re.IGNORECASE)
CAPTION_REGEX = re.compile(r"<caption\b[^>]*>([\s\S]*?)</caption\s*>", flags=re.IGNORECASE)
HEADER_CELL_REGEX = re.compile(r"<th\b[^>]*>([\s\S]*?)</th\s*>", flags=re.IGNORECASE)
ROW_REGEX = re.compile(r"<tr\b[^>]*>([\s\S]*?)</tr\s*>", flags=re.IGNORECASE)
CELL_REGEX = re.compile(r"<t[dh]\b[^>]*>([\s\S]*?)</t[dh]\s*>", flags=re.IGNORECASE)
HEADING_REGEX = re.compile(r"<h([1-6])\b[^>]*>([\s\S]*?)</h\1\s*>", flags=re.IGNORECASE)
PARAGRAPH_REGEX = re.compile(r"<p(?=[\s>])[^>]*>([\s\S]*?)</p\s*>", flags=re.IGNORECASE)
LIST_REGEX = re.compile(r"<(ul|ol)\b[^>]*>([\s\S]*?)</\1\s*>", flags=re.IGNORECASE)
LIST_ITEM_REGEX = re.compile(r"<li\b[^>]*>([\s\S]*?)</li\s*>", flags=re.IGNORECASE)
JSON_LD_REGEX = re.compile(
    r"<script\b[^>]*type\s*=\s*[\"']application/ld\+json[\"'][^>]*>([\s\S]*?)</script\s*>",
    flags=re.IGNORECASE,
)
HREF_REGEX = re.compile(
    r"<a\b[^>]*?(?<![\w-])href\s*=\s*[\"']([^\"']+)[\"']",
    flags=re.IGNORECASE,
)
SELECTOR_ID_REGEX = re.compile(r"#([A-Za-z_][\w-]*)")
SELECTOR_CLASS_REGEX = re.compile(r"\.([A-Za-z_-][\w-]*)")
SELECTOR_TAG_REGEX = re.compile(r"^([A-Za-z][A-Za-z0-9]*)")
SELECTOR_ATTRIBUTE_REGEX = re.compile(
    r"\[\s*([A-Za-z_:][\w:.-]*)\s*(?:=\s*[\"']?([^\"'\]]*)[\"']?\s*)?\]"
)


def parse_attributes(raw: str) -> dict[str, str]:
    """
    Parse an opening tag's attribute string. Keys are lower-cased, the first
    occurrence of a key wins and valueless attributes map to "".
    """

    attributes: dict[str, str] = {}
    for match in ATTRIBUTE_REGEX.finditer(raw):
        name = match.group(1).lower()
        value = next((group for group in match.groups()[1:] if group is not None), "")
        attributes.setdefault(name, decode_html_entities(value))
    return attributes


def _element_regex(tag: str, attribute_pattern: str) -> re.Pattern[str]:
    return re.compile(
        rf"<(?P<tag>{tag})(?P<attrs>{attribute_pattern})>(?P<content>[\s\S]*?)</(?P=tag)\s*>"
        rf"|<(?P<void>{tag})(?P<void_attrs>{attribute_pattern})/?>",
        flags=re.IGNORECASE,
    )


def _class_tokens(element: ExtractedElement) -> list[str]:
    return element.attributes.get("class", "").split()


def _reindex(elements: list[ExtractedElement]) -> list[ExtractedElement]:
    return [replace(element, index=index) for index, element in enumerate(elements)]


def extract_links(html: str, base_url: str) -> list[str]:
    """
    Unique absolute hrefs in document order, skipping `javascript:` and `#`
    targets. Unresolvable hrefs are dropped.
    """

    links: list[str] = []
    seen: set[str] = set()
    for match in HREF_REGEX.finditer(html):
        href = decode_html_entities(match.group(1).strip())
        if not href or href.startswith("#") or href.lower().startswith("javascript:"):
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


class HtmlExtractionEngine:
    """
    Selector queries and structured extractors over one HTML document.
    """

    backend = "regex"

    def __init__(self, html: str, base_url: str = "") -> None:
        self._html = html
        self._base_url = base_url

    @property
    def html(self) -> str:
        return self._html

    @property
    def base_url(self) -> str:
        return self._base_url

    def _collect(self, pattern: re.Pattern[str]) -> list[ExtractedElement]:
        elements: list[ExtractedElement] = []
        for match in pattern.finditer(self._html):
            if match.group("tag") is not None:
                tag = match.group("tag")
                attrs = match.group("attrs")
                content = match.group("content")
            else:
                tag = match.group("void")
                attrs = match.group("void_attrs")
                content = ""
            elements.append(
                ExtractedElement(
                    tag=tag.lower(),
                    attributes=parse_attributes(attrs or ""),
                    content=content.strip(),
                    outer_html=match.group(0),
                    index=len(elements),
                )
            )
        return elements

    def get_elements_by_tag_name(self, tag_name: str) -> SelectorResult:
        tag = re.escape(tag_name.strip())
        if not tag:
            return SelectorResult()
        return SelectorResult(self._collect(_element_regex(tag, r"(?:\s[^>]*)?")))

    def get_elements_by_class_name(self, class_name: str) -> SelectorResult:
        """
        Elements whose class attribute contains `class_name` as a whole token.
        """

        name = class_name.strip()
        if not name:
            return SelectorResult()
        escaped = re.escape(name)
        pattern = _element_regex(
            ANY_TAG,
            rf"\s[^>]*?(?<![\w-])class\s*=\s*[\"'][^\"']*?(?<![\w-]){escaped}(?![\w-])[^\"']*[\"'][^>]*",
        )
        matched = [element for element in self._collect(pattern) if name in _class_tokens(element)]
        return SelectorResult(_reindex(matched))

    def get_element_by_id(self, element_id: str) -> ExtractedElement | None:
        identifier = element_id.strip()
        if not identifier:
            return None
        escaped = re.escape(identifier)
        pattern = _element_regex(
            ANY_TAG,
            rf"\s[^>]*?(?<![\w-])id\s*=\s*[\"']{escaped}[\"'][^>]*",
        )
        for element in self._collect(pattern):
            if element.attributes.get("id") == identifier:
                return replace(element, index=0)
        return None

    def get_elements_by_attribute(self, attribute: str, value: str | None = None) -> SelectorResult:
        """
        Elements carrying `attribute`, optionally with exactly `value`.
        """

        name = attribute.strip().lower()
        if not name:
            return SelectorResult()
        escaped = re.escape(name)
        if value is None:
            attribute_pattern = rf"\s[^>]*?(?<![\w:-]){escaped}(?![\w:.-])[^>]*"
        else:
            attribute_pattern = (
                rf"\s[^>]*?(?<![\w:-]){escaped}\s*=\s*[\"']?{re.escape(value)}[\"']?[^>]*"
            )
        matched = [
            element
            for element in self._collect(_element_regex(ANY_TAG, attribute_pattern))
            if name in element.attributes
            and (value is None or element.attributes[name] == value)
        ]
        return SelectorResult(_reindex(matched))

    def query_selector_all(self, selector: str) -> SelectorResult:
        """
        Simple selectors only: `tag`, `.class`, `#id`, `[attr]`, `[attr=value]`
        and compounds such as `div.card[data-id=1]`. An ID short-circuits the
        rest of the selector. Anything else yields an empty result.
        """

        selector = selector.strip()
        if not selector:
            return SelectorResult()

        id_match = SELECTOR_ID_REGEX.search(selector)
        if id_match:
            element = self.get_element_by_id(id_match.group(1))
            return SelectorResult([element] if element is not None else [])

        tag_match = SELECTOR_TAG_REGEX.match(selector)
        class_names = SELECTOR_CLASS_REGEX.findall(selector)
        attribute_match = SELECTOR_ATTRIBUTE_REGEX.search(selector)

        if tag_match:
            candidates = self.get_elements_by_tag_name(tag_match.group(1)).elements
        elif class_names:
            candidates = self.get_elements_by_class_name(class_names[0]).elements
        elif attribute_match:
            candidates = self.get_elements_by_attribute(
                attribute_match.group(1), attribute_match.group(2)
            ).elements
        else:
            return SelectorResult()

        if class_names:
            candidates = [
                element
                for element in candidates
                if all(name in _class_tokens(element) for name in class_names)
            ]
        if attribute_match:
            name = attribute_match.group(1).lower()
            value = attribute_match.group(2)
            candidates = [
                element
                for element in candidates
                if name in element.attributes
                and (value is None or element.attributes[name] == value)
            ]
        return SelectorResult(_reindex(candidates))

    def query_selector(self, selector: str) -> ExtractedElement | None:
        return self.query_selector_all(selector).first

    def get_title(self) -> str | None:
        match = TITLE_REGEX.search(self._html)
        if not match:
            return None
        title = fragment_text(match.group(1))
        return title or None

    def _meta_value(self, key: str, name: str) -> str | None:
        wanted = name.lower()
        for match in META_REGEX.finditer(self._html):
            attributes = parse_attributes(match.group(1))
            if attributes.get(key, "").lower() == wanted and attributes.get("content"):
                return attributes["content"]
        return None

    def get_meta_content(self, name: str) -> str | None:
        return self._meta_value("name", name)

    def get_meta_property(self, prop: str) -> str | None:
        return self._meta_value("property", prop)

    def get_canonical(self) -> str | None:
        for match in LINK_TAG_REGEX.finditer(self._html):
            attributes = parse_attributes(match.group(1))
            if "canonical" in attributes.get("rel", "").lower().split() and attributes.get("href"):
                return self.resolve_url(attributes["href"])
        return None

    def _twitter(self, name: str) -> str | None:
        return self.get_meta_content(name) or self.get_meta_property(name)

    def get_meta_info(self) -> MetaInfo:
        return MetaInfo(
            title=self.get_title(),
            description=self.get_meta_content("description"),
            keywords=self.get_meta_content("keywords"),
            author=self.get_meta_content("author"),
            viewport=self.get_meta_content("viewport"),
            robots=self.get_meta_content("robots"),
            canonical=self.get_canonical(),
            og_title=self.get_meta_property("og:title"),
            og_description=self.get_meta_property("og:description"),
            og_image=self.get_meta_property("og:image"),
            og_url=self.get_meta_property("og:url"),
            twitter_card=self._twitter("twitter:card"),
            twitter_title=self._twitter("twitter:title"),
            twitter_description=self._twitter("twitter:description"),
            twitter_image=self._twitter("twitter:image"),
        )

    def get_links(self) -> list[LinkInfo]:
        links: list[LinkInfo] = []
        for match in ANCHOR_REGEX.finditer(self._html):
            attributes = parse_attributes(match.group(1))
            href = attributes.get("href", "").strip()
            if not href or href.lower().startswith("javascript:"):
                continue
            links.append(
                LinkInfo(
                    href=self.resolve_url(href),
                    text=fragment_text(match.group(2)),
                    is_external=self.is_external_url(href),
                    is_anchor=href.startswith("#"),
                    title=attributes.get("title"),
                    rel=attributes.get("rel"),
                    target=attributes.get("target"),
                )
            )
        return links

    def get_internal_links(self) -> list[LinkInfo]:
        return [link for link in self.get_links() if not link.is_external and not link.is_anchor]

    def get_external_links(self) -> list[LinkInfo]:
        return [link for link in self.get_links() if link.is_external]

    def get_images(self) -> list[ImageInfo]:
        images: list[ImageInfo] = []
        for match in IMAGE_REGEX.finditer(self._html):
            attributes = parse_attributes(match.group(1))
            src = attributes.get("src", "").strip()
            if not src:
                continue
            images.append(
                ImageInfo(
                    src=self.resolve_url(src),
                    alt=attributes.get("alt", ""),
                    title=attributes.get("title"),
                    width=attributes.get("width"),
                    height=attributes.get("height"),
                    loading=attributes.get("loading"),
                )
            )
        return images

    def get_tables(self) -> list[TableData]:
        """
        Tables as header/rows/caption. A row made of `th` cells is treated as
        the header row once headers are found and is not repeated in `rows`.
        """

        tables: list[TableData] = []
        for table_match in TABLE_REGEX.finditer(self._html):
            table_html = table_match.group(1)
            caption_match = CAPTION_REGEX.search(table_html)
            caption = fragment_text(caption_match.group(1)) if caption_match else None
            headers = [fragment_text(cell) for cell in HEADER_CELL_REGEX.findall(table_html)]

            rows: list[list[str]] = []
            for row_html in ROW_REGEX.findall(table_html):
                if headers and re.search(r"<th\b", row_html, flags=re.IGNORECASE):
                    continue
                cells = [fragment_text(cell) for cell in CELL_REGEX.findall(row_html)]
                if cells:
                    rows.append(cells)

            tables.append(TableData(headers=headers, rows=rows, caption=caption or None))
        return tables

    def get_text_content(self) -> str:
        return extract_text(self._html)

    def get_structured_text(self) -> StructuredText:
        headings = [
            Heading(level=int(level), text=fragment_text(content))
            for level, content in HEADING_REGEX.findall(self._html)
        ]
        paragraphs = [fragment_text(content) for content in PARAGRAPH_REGEX.findall(self._html)]
        lists: list[ListBlock] = []
        for list_type, content in LIST_REGEX.findall(self._html):
            items = [fragment_text(item) for item in LIST_ITEM_REGEX.findall(content)]
            items = [item for item in items if item]
            if items:
                lists.append(ListBlock(type=list_type.lower(), items=items))
        return StructuredText(
            headings=[heading for heading in headings if heading.text],
            paragraphs=[paragraph for paragraph in paragraphs if paragraph],
            lists=lists,
        )

    def get_json_ld(self) -> list[Any]:
        """
        Parsed JSON-LD blocks. Blocks that are not valid JSON are skipped.
        """

        blocks: list[Any] = []
        for index, raw in enumerate(JSON_LD_REGEX.findall(self._html)):
            try:
                blocks.append(json.loads(raw.strip()))
            except json.JSONDecodeError as exc:
                log_event(
                    logger,
                    logging.DEBUG,
                    "json_ld_invalid",
                    base_url=self._base_url,
                    block_index=index,
                    error=str(exc),
                )
        return blocks

    def resolve_url(self, url: str) -> str:
        if not self._base_url or url.startswith(("http://", "https://", "//")):
            return url
        try:
            return urljoin(self._base_url, url)
        except ValueError:
            return url

    def is_external_url(self, url: str) -> bool:
        if not self._base_url or url.startswith("#"):
            return False
        try:
            return origin_of(urljoin(self._base_url, url)) != origin_of(self._base_url)
        except ValueError:
            return False
