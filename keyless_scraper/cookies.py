"""
Flat in-memory cookie store.

Only `name=value` pairs are kept. Domain, path, expiry and secure attributes
are not tracked, and commas inside `Expires` attributes are not handled.
"""

from __future__ import annotations


class CookieJar:
    """
    Name to value cookie map with overwrite-on-set semantics.
    """

    def __init__(self) -> None:
        self._cookies: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._cookies)

    def parse_cookies(self, set_cookie_header: str | None) -> None:
        """
        Store every cookie from a (possibly comma-joined) Set-Cookie header.
        """

        if not set_cookie_header:
            return

        for entry in set_cookie_header.split(","):
            pair = entry.split(";", 1)[0].strip()
            if "=" not in pair:
                continue
            name, value = pair.split("=", 1)
            name = name.strip()
            if name:
                self._cookies[name] = value.strip()

    def get_cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._cookies)

    def clear(self) -> None:
        self._cookies.clear()
