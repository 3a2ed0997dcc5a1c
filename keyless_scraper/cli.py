"""
Command line entry point for one-off scrapes and robots.txt inspection.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from keyless_scraper.config import SCRAPING_PRESETS, ScraperConfiguration, get_scraper_runtime_settings
from keyless_scraper.executor import KeylessScraperExecutor
from keyless_scraper.logging_utils import configure_logging
from keyless_scraper.parsing import ENGINE_BACKENDS, HtmlExtractionEngine, create_extraction_engine
from keyless_scraper.types import ExecutionResult
from keyless_scraper.urls import origin_of, resolve_url

EXTRACTORS = ("meta", "links", "text", "tables", "json-ld")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keyless-scraper",
        description="Fetch public pages politely and extract structured data.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch = subparsers.add_parser("fetch", help="Fetch one or more URLs.")
    fetch.add_argument("urls", nargs="+", help="Absolute URLs, or paths relative to --base-url.")
    fetch.add_argument(
        "--base-url",
        dest="base_url",
        default=None,
        help="Target base URL. Defaults to the origin of the first URL.",
    )
    fetch.add_argument(
        "--preset",
        dest="preset",
        choices=sorted(SCRAPING_PRESETS),
        default=None,
        help="Politeness preset. Defaults to KEYLESS_SCRAPER_DEFAULT_PRESET.",
    )
    fetch.add_argument(
        "--concurrency",
        dest="concurrency",
        type=int,
        default=None,
        help="Number of URLs fetched together per chunk.",
    )
    fetch.add_argument(
        "--extract",
        dest="extract",
        choices=EXTRACTORS,
        default=None,
        help="Structured data to extract from each HTML body.",
    )
    fetch.add_argument(
        "--backend",
        dest="backend",
        choices=sorted(ENGINE_BACKENDS),
        default="regex",
        help="Extraction engine backend.",
    )

    robots = subparsers.add_parser("robots", help="Fetch and print robots.txt rules.")
    robots.add_argument("url", help="Any URL on the target origin.")
    return parser


def extract(engine: HtmlExtractionEngine, kind: str) -> Any:
    if kind == "meta":
        return asdict(engine.get_meta_info())
    if kind == "links":
        return [asdict(link) for link in engine.get_links()]
    if kind == "text":
        return engine.get_text_content()
    if kind == "tables":
        return [asdict(table) for table in engine.get_tables()]
    if kind == "json-ld":
        return engine.get_json_ld()
    raise ValueError(f"Unsupported extractor '{kind}'.")


def _result_payload(
    url: str,
    result: ExecutionResult,
    *,
    page_url: str,
    extract_kind: str | None,
    backend: str,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "url": url,
        "success": result.success,
        "status_code": result.status_code,
        "duration_ms": round(result.duration_ms, 1),
        "from_cache": result.from_cache,
        "error": result.error,
        "error_code": result.error_code,
        "body_length": len(result.raw_body),
    }
    if extract_kind and result.success and result.raw_body:
        engine = create_extraction_engine(result.raw_body, page_url, backend=backend)
        payload["extracted"] = extract(engine, extract_kind)
    return payload


async def _run_fetch(args: argparse.Namespace, executor: KeylessScraperExecutor) -> tuple[int, Any]:
    settings = get_scraper_runtime_settings()
    try:
        base_url = args.base_url or origin_of(args.urls[0])
        config = ScraperConfiguration.from_preset(args.preset or settings.default_preset, baseUrl=base_url)
    except ValueError as exc:
        return 2, {"error": str(exc)}

    flow = await executor.authenticate(config)
    if flow.type == "error":
        return 2, {"error": flow.error, "title": flow.title}

    results = await executor.scrape_multiple(config, args.urls, concurrency=args.concurrency)
    payload = [
        _result_payload(
            url,
            result,
            page_url=resolve_url(url, config.base_url),
            extract_kind=args.extract,
            backend=args.backend,
        )
        for url, result in results.items()
    ]
    exit_code = 0 if all(result.success for result in results.values()) else 1
    return exit_code, payload


async def _run_robots(args: argparse.Namespace, executor: KeylessScraperExecutor) -> tuple[int, Any]:
    result = await executor.robots_policy.fetch_robots_txt(args.url)
    return (0 if result.success else 1), asdict(result)


def main(argv: Sequence[str] | None = None, *, executor: KeylessScraperExecutor | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(get_scraper_runtime_settings().log_level)

    executor = executor or KeylessScraperExecutor()
    if args.command == "fetch":
        exit_code, payload = asyncio.run(_run_fetch(args, executor))
    else:
        exit_code, payload = asyncio.run(_run_robots(args, executor))

    print(json.dumps(payload, indent=2, default=str))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
