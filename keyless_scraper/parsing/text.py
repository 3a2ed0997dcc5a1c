"""
Text normalization helpers for raw HTML.
"""

from __future__ import annotations

import re

_NAMED_ENTITIES = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}
_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|nbsp|amp|lt|gt|quot|apos);")
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_CONTENT_RE = re.compile(
    r"<script\b[^>]*>[\s\S]*?</script\s*>"
    r"|<style\b[^>]*>[\s\S]*?</style\s*>"
    r"|<noscript\b[^>]*>[\s\S]*?</noscript\s*>"
    r"|<!--[\s\S]*?-->",
    flags=re.IGNORECASE,
)


def _replace_entity(match: re.Match[str]) -> str:
    token = match.group(1)
    if not token.startswith("#"):
        return _NAMED_ENTITIES[token]
    try:
        if token[1] in "xX":
            return chr(int(token[2:], 16))
        return chr(int(token[1:]))
    except (ValueError, OverflowError):
        return match.group(0)


def decode_html_entities(text: str) -> str:
    """
    Decode the named entities above plus decimal and hex character references.

    Decoding is single-pass, so `&amp;lt;` becomes `&lt;`.
    """

    return _ENTITY_RE.sub(_replace_entity, text)


def strip_non_content(html: str) -> str:
    return _NON_CONTENT_RE.sub("", html)


def fragment_text(html: str) -> str:
    """
    Text of an HTML fragment: tags become spaces, entities are decoded and
    whitespace is collapsed.
    """

    text = _TAG_RE.sub(" ", html)
    text = decode_html_entities(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_text(html: str) -> str:
    """
    Visible text of a document, ignoring scripts, styles, noscript and comments.
    """

    return fragment_text(strip_non_content(html))
