"""
tests/test_cli.py

End-to-end CLI tests driven through an executor wired to the stub session.
"""

from __future__ import annotations

import json

from keyless_scraper.cli import main


def test_fetch_prints_report_with_extracted_links(executor, session, make_response, capsys) -> None:
    session.route("https://example.com/page", make_response(200, '<a href="/x">X</a>'))

    exit_code = main(["fetch", "https://example.com/page", "--extract", "links"], executor=executor)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload[0]["url"] == "https://example.com/page"
    assert payload[0]["status_code"] == 200
    assert payload[0]["extracted"][0]["href"] == "https://example.com/x"


def test_fetch_relative_paths_with_base_url(executor, session, make_response, capsys) -> None:
    session.route("https://example.com/docs", make_response(200, "<title>Docs</title>"))

    exit_code = main(
        ["fetch", "/docs", "--base-url", "https://example.com", "--preset", "fast", "--extract", "meta"],
        executor=executor,
    )

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload[0]["extracted"]["title"] == "Docs"


def test_fetch_failure_sets_exit_code(executor, capsys) -> None:
    exit_code = main(["fetch", "https://example.com/missing"], executor=executor)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload[0]["error"] == "HTTP 404"
    assert "extracted" not in payload[0]


def test_fetch_invalid_url(executor, session, capsys) -> None:
    exit_code = main(["fetch", "not-a-url"], executor=executor)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 2
    assert "error" in payload
    assert session.calls == []


def test_robots_command_prints_rules(executor, session, make_response, capsys) -> None:
    session.route(
        "https://example.com/robots.txt",
        make_response(200, "User-agent: *\nDisallow: /private/\nSitemap: https://example.com/s.xml\n"),
    )

    exit_code = main(["robots", "https://example.com/any/page"], executor=executor)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["rules"]["disallowed"] == ["/private/"]
    assert payload["rules"]["sitemaps"] == ["https://example.com/s.xml"]
