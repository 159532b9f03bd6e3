"""
Exception types raised by the fetcher and store collaborators.
"""
from __future__ import annotations


class CrawlError(Exception):
    """Base class for errors that abort a single crawl branch."""


class FetchError(CrawlError):
    """Transport failure while fetching a page."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class StoreError(CrawlError):
    """Failure while writing to or reading from the depth store."""

    def __init__(self, depth: int, key: str, message: str) -> None:
        super().__init__(f"[{depth}] {key}: {message}")
        self.depth = depth
        self.key = key
