"""
tests/test_cookies.py

Unit tests for the flat cookie jar.
"""

from __future__ import annotations

from keyless_scraper.cookies import CookieJar


def test_parses_comma_joined_set_cookie_header() -> None:
    jar = CookieJar()
    jar.parse_cookies("session=abc; Path=/; HttpOnly, theme=dark; Secure")

    assert jar.as_dict() == {"session": "abc", "theme": "dark"}
    assert jar.get_cookie_header() == "session=abc; theme=dark"


def test_later_cookie_overwrites_earlier() -> None:
    jar = CookieJar()
    jar.parse_cookies("session=abc")
    jar.parse_cookies("session=xyz")

    assert jar.as_dict() == {"session": "xyz"}
    assert len(jar) == 1


def test_value_may_contain_equals_sign() -> None:
    jar = CookieJar()
    jar.parse_cookies("token=a=b=c; Path=/")
    assert jar.as_dict() == {"token": "a=b=c"}


def test_entries_without_pair_are_skipped() -> None:
    jar = CookieJar()
    jar.parse_cookies("garbage, =nameless, ok=1")
    assert jar.as_dict() == {"ok": "1"}


def test_missing_header_is_noop() -> None:
    jar = CookieJar()
    jar.parse_cookies(None)
    jar.parse_cookies("")
    assert len(jar) == 0
    assert jar.get_cookie_header() == ""


def test_clear() -> None:
    jar = CookieJar()
    jar.parse_cookies("a=1")
    jar.clear()
    assert len(jar) == 0
