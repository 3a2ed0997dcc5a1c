"""
Records produced by the HTML extraction engines.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from keyless_scraper.parsing.text import fragment_text


@dataclass(frozen=True)
class ExtractedElement:
    tag: str
    attributes: dict[str, str]
    content: str
    outer_html: str
    index: int

    @property
    def text(self) -> str:
        return fragment_text(self.content)


@dataclass(frozen=True)
class SelectorResult:
    """
    Ordered match set for one selector query.
    """

    elements: list[ExtractedElement] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[ExtractedElement]:
        return iter(self.elements)

    @property
    def count(self) -> int:
        return len(self.elements)

    @property
    def first(self) -> ExtractedElement | None:
        return self.elements[0] if self.elements else None

    @property
    def last(self) -> ExtractedElement | None:
        return self.elements[-1] if self.elements else None

    @property
    def texts(self) -> list[str]:
        return [element.text for element in self.elements]

    def attrs(self, name: str) -> list[str]:
        key = name.lower()
        return [element.attributes.get(key, "") for element in self.elements]


@dataclass(frozen=True)
class MetaInfo:
    title: str | None = None
    description: str | None = None
    keywords: str | None = None
    author: str | None = None
    viewport: str | None = None
    robots: str | None = None
    canonical: str | None = None
    og_title: str | None = None
    og_description: str | None = None
    og_image: str | None = None
    og_url: str | None = None
    twitter_card: str | None = None
    twitter_title: str | None = None
    twitter_description: str | None = None
    twitter_image: str | None = None


@dataclass(frozen=True)
class LinkInfo:
    href: str
    text: str
    is_external: bool
    is_anchor: bool
    title: str | None = None
    rel: str | None = None
    target: str | None = None


@dataclass(frozen=True)
class ImageInfo:
    src: str
    alt: str = ""
    title: str | None = None
    width: str | None = None
    height: str | None = None
    loading: str | None = None


@dataclass(frozen=True)
class TableData:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    caption: str | None = None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ListBlock:
    type: Literal["ul", "ol"]
    items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StructuredText:
    headings: list[Heading] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)
    lists: list[ListBlock] = field(default_factory=list)
