"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from depthcrawl.core import DEFAULT_WORKERS, CrawlConfig, CrawlStats, crawl
from depthcrawl.errors import CrawlError
from depthcrawl.fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from depthcrawl.urls import normalize_url


def non_negative_int(value: str) -> int:
    """argparse type for counts that may be zero."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value!r}")
    return number


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least one."""
    number = non_negative_int(value)
    if number == 0:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value!r}")
    return number


def positive_float(value: str) -> float:
    """argparse type for durations in seconds."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {value!r}")
    return number


def parse_bool(value: str) -> bool:
    """argparse type accepting only 'true' or 'false'."""
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise argparse.ArgumentTypeError(f"expected 'true' or 'false', got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depthcrawl",
        description="Crawl links from a seed URL up to a fixed depth and save each page by depth.",
    )
    parser.add_argument("url", help="Seed URL (e.g. example.com)")
    parser.add_argument("max_urls", type=non_negative_int, help="Maximum links followed per page")
    parser.add_argument("depth", type=non_negative_int, help="Maximum crawl depth (0 = seed only)")
    parser.add_argument(
        "uniqueness",
        type=parse_bool,
        help="'true' to skip links already saved at the previous depth",
    )
    parser.add_argument("--output-dir", default=".", help="Directory holding the per-depth folders (default: .)")
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=DEFAULT_WORKERS,
        help=f"Pages fetched in parallel per depth (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--deadline", type=positive_float, help="Stop scheduling new pages after this many seconds")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--fail-fast", action="store_true", help="Abort the whole crawl on the first fetch or save error")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total pages crawled:    {stats.pages_crawled}\n")
    for depth in sorted(stats.pages_per_level):
        sys.stderr.write(f"  depth {depth}: {stats.pages_per_level[depth]}\n")
    sys.stderr.write(f"Links extracted:        {stats.links_extracted}\n")
    sys.stderr.write(f"Filtered (uniqueness):  {stats.links_filtered}\n")
    sys.stderr.write(f"Dropped (fan-out cap):  {stats.links_capped}\n")
    sys.stderr.write(f"Skipped invalid URLs:   {stats.skipped_invalid}\n")
    sys.stderr.write(f"Skipped duplicates:     {stats.skipped_duplicate}\n\n")

    if stats.cancelled:
        sys.stderr.write("Crawl stopped before completion.\n\n")

    if stats.failures:
        sys.stderr.write(f"Failed pages ({len(stats.failures)}):\n")
        for failure in stats.failures:
            sys.stderr.write(f"  [{failure.depth}] {failure.kind}: {failure.message}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if normalize_url(args.url) is None:
        sys.stderr.write("Please enter valid Url\n")
        return 1

    config = CrawlConfig(
        max_fanout=args.max_urls,
        max_depth=args.depth,
        uniqueness=args.uniqueness,
        workers=args.workers,
        timeout_s=args.timeout,
        deadline_s=args.deadline,
        user_agent=args.user_agent,
        fail_fast=args.fail_fast,
    )

    if args.verbose:
        sys.stderr.write(f"Starting crawl from: {normalize_url(args.url)}\n")
        sys.stderr.write(f"Max links per page: {config.max_fanout}, max depth: {config.max_depth}\n\n")

    try:
        stats = crawl(args.url, config, output_dir=args.output_dir, progress=args.verbose)
    except CrawlError as e:
        sys.stderr.write(f"Crawl aborted: {e}\n")
        return 1
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        return 130

    if args.verbose:
        sys.stderr.write("\n")
        print_summary(stats)

    print("Crawling completed successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
