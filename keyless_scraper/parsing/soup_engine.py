"""
BeautifulSoup-backed selector queries.

Structured extractors are inherited from the regex engine; only element
lookups go through the parsed tree, which handles nesting and full CSS.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from keyless_scraper.parsing.html_parsers import HtmlExtractionEngine
from keyless_scraper.parsing.models import ExtractedElement, SelectorResult


def _attribute_text(value: object) -> str:
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    return str(value)


def _to_element(node: Tag, index: int) -> ExtractedElement:
    return ExtractedElement(
        tag=node.name.lower(),
        attributes={key.lower(): _attribute_text(value) for key, value in node.attrs.items()},
        content=node.decode_contents().strip(),
        outer_html=str(node),
        index=index,
    )


def _to_result(nodes: list[Tag]) -> SelectorResult:
    return SelectorResult([_to_element(node, index) for index, node in enumerate(nodes)])


class SoupExtractionEngine(HtmlExtractionEngine):
    backend = "soup"

    def __init__(self, html: str, base_url: str = "") -> None:
        super().__init__(html, base_url)
        self._soup = BeautifulSoup(html, "html.parser")

    def get_elements_by_tag_name(self, tag_name: str) -> SelectorResult:
        name = tag_name.strip().lower()
        if not name:
            return SelectorResult()
        return _to_result(self._soup.find_all(name))

    def get_elements_by_class_name(self, class_name: str) -> SelectorResult:
        name = class_name.strip()
        if not name:
            return SelectorResult()
        return _to_result(self._soup.find_all(class_=name))

    def get_element_by_id(self, element_id: str) -> ExtractedElement | None:
        identifier = element_id.strip()
        if not identifier:
            return None
        node = self._soup.find(id=identifier)
        return _to_element(node, 0) if isinstance(node, Tag) else None

    def get_elements_by_attribute(self, attribute: str, value: str | None = None) -> SelectorResult:
        name = attribute.strip().lower()
        if not name:
            return SelectorResult()
        return _to_result(self._soup.find_all(attrs={name: value if value is not None else True}))

    def query_selector_all(self, selector: str) -> SelectorResult:
        """
        Full CSS selector support via soupsieve. Invalid selectors yield an
        empty result, matching the regex engine.
        """

        selector = selector.strip()
        if not selector:
            return SelectorResult()
        try:
            nodes = self._soup.select(selector)
        except SelectorSyntaxError:
            return SelectorResult()
        return _to_result(nodes)
