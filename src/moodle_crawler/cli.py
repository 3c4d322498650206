from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import (
    ConfigError,
    build_session,
    load_session_cookie,
    normalize_base_url,
)
from .crawl import CrawlConfig, Crawler
from .http_client import FetchError, HttpClient


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {text}")
    return value


def _configure_logging(verbose: bool) -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moodle-crawler",
        description="Download the instructional content of a Moodle course.",
    )
    parser.add_argument(
        "--id",
        dest="course_id",
        type=_positive_int,
        required=True,
        help="The ID of the Moodle course",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--domain", help="The Moodle domain, e.g. hpi.de")
    target.add_argument(
        "--base-url",
        help="Full base URL when Moodle is not at the site root, "
        "e.g. https://example.org/moodle",
    )
    parser.add_argument(
        "--dir",
        dest="out_dir",
        type=Path,
        default=Path("./output"),
        help="Absolute or relative output directory",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="File with COOKIE_NAME and COOKIE_VALUE (default: ./.env)",
    )
    parser.add_argument("--timeout", type=float, default=45)
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retries for connection errors; HTTP errors are never retried",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort on the first network or filesystem error",
    )
    parser.add_argument("--no-progress", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(bool(args.verbose))

    try:
        base_url = normalize_base_url(args.base_url or args.domain)
        cookie = load_session_cookie(args.env_file)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    session = build_session(base_url, cookie)
    http = HttpClient(
        session,
        timeout_s=float(args.timeout),
        max_retries=int(args.retries),
    )
    crawl_cfg = CrawlConfig(
        base_url=base_url,
        course_id=int(args.course_id),
        out_dir=args.out_dir.resolve(),
        fail_fast=bool(args.fail_fast),
        show_progress=not bool(args.no_progress),
    )

    try:
        crawler = Crawler(http=http, config=crawl_cfg)
        crawler.crawl()
    except (FetchError, OSError) as e:
        print(f"crawl aborted: {e}", file=sys.stderr)
        return 1

    print(str(crawler.summary_path))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
