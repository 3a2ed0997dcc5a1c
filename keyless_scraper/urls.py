"""
URL helpers shared by the robots engine, executor and extraction engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> str:
    """
    Return `scheme://host[:port]` for `url`, dropping default ports.

    Raises ValueError when the URL has no host or an invalid port.
    """

    parsed = urlsplit(url)
    host = (parsed.hostname or "").lower()
    if not host:
        raise ValueError(f"URL has no host: {url!r}")
    scheme = (parsed.scheme or "https").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_absolute_http_url(url: str) -> bool:
    try:
        parsed = urlsplit(url)
        _ = parsed.port
    except ValueError:
        return False
    return parsed.scheme.lower() in DEFAULT_PORTS and bool(parsed.hostname)


def resolve_url(url: str, base_url: str) -> str:
    """
    Resolve `url` against `base_url`; absolute http(s) URLs pass through.
    """

    if url.lower().startswith(("http://", "https://")):
        return url
    return urljoin(base_url, url)


def with_query(url: str, params: Mapping[str, str] | None) -> str:
    """
    Append `params` to the query string of `url`, keeping any existing query.
    """

    if not params:
        return url
    parts = urlsplit(url)
    extra = urlencode(list(params.items()))
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit(parts._replace(query=query))
