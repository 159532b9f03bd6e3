"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import sys
import threading
import time
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from depthcrawl.errors import CrawlError, FetchError
from depthcrawl.fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, Fetcher, RequestsFetcher
from depthcrawl.links import extract_links
from depthcrawl.store import DepthStore, FileDepthStore
from depthcrawl.urls import encode_filename, normalize_url

DEFAULT_WORKERS = 4


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Limits and switches for one crawl run."""
    max_fanout: int
    max_depth: int
    uniqueness: bool = False
    workers: int = DEFAULT_WORKERS
    timeout_s: float = DEFAULT_TIMEOUT
    deadline_s: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT
    fail_fast: bool = False

    def __post_init__(self) -> None:
        if self.max_fanout < 0:
            raise ValueError(f"max_fanout must be >= 0, got {self.max_fanout}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")
        if self.deadline_s is not None and self.deadline_s <= 0:
            raise ValueError(f"deadline_s must be > 0, got {self.deadline_s}")


@dataclass(slots=True)
class CrawlFailure:
    """A branch that was abandoned because of a fetch or store error."""
    url: str
    depth: int
    kind: str
    message: str


@dataclass(slots=True)
class PageVisit:
    """Outcome of processing one URL at one depth."""
    url: str
    depth: int
    key: str
    children: List[str] = field(default_factory=list)
    links_extracted: int = 0
    links_filtered: int = 0
    links_capped: int = 0
    failure: Optional[CrawlFailure] = None
    skipped: bool = False


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    links_extracted: int = 0
    links_filtered: int = 0
    links_capped: int = 0
    skipped_invalid: int = 0
    skipped_duplicate: int = 0
    pages_per_level: Dict[int, int] = field(default_factory=lambda: defaultdict(int))
    failures: List[CrawlFailure] = field(default_factory=list)
    cancelled: bool = False

    def record_visit(self, visit: PageVisit) -> None:
        """Fold a finished visit into the totals."""
        if visit.failure is not None:
            self.failures.append(visit.failure)
            return
        if visit.skipped:
            return
        self.pages_crawled += 1
        self.pages_per_level[visit.depth] += 1
        self.links_extracted += visit.links_extracted
        self.links_filtered += visit.links_filtered
        self.links_capped += visit.links_capped


def filter_unique(links: Iterable[str], previous_keys: Set[str]) -> Set[str]:
    """
    Drop links whose page key is already stored at the previous level.

    Links that do not normalize are kept; they are discarded later when
    they are scheduled.
    """
    unique: Set[str] = set()
    for link in links:
        url = normalize_url(link)
        if url is not None and encode_filename(url) in previous_keys:
            continue
        unique.add(link)
    return unique


def limit_links(links: Iterable[str], limit: int) -> List[str]:
    """Keep the first `limit` links in sorted order."""
    return sorted(links)[:limit]


def print_scan_line(visit: PageVisit) -> None:
    """Print single scan result line."""
    if visit.failure is not None:
        sys.stderr.write(f"  ✗ ERROR [{visit.depth}] {visit.url}: {visit.failure.message}\n")
    elif not visit.skipped:
        sys.stderr.write(f"  → [{visit.depth}] {visit.url} (+{len(visit.children)} links)\n")
    sys.stderr.flush()


class Crawler:
    """
    Depth-bounded crawler.

    Levels are expanded breadth-first: every page at depth d is fetched,
    stored and parsed before any page at depth d + 1 is started. Pages of
    one level are processed concurrently on a thread pool.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Fetcher,
        store: DepthStore,
        progress: bool = False,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.store = store
        self.progress = progress
        self._stop = threading.Event()
        self._deadline: Optional[float] = None

    def cancel(self) -> None:
        """Stop scheduling work; pages already in flight still finish."""
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        if not self._stop.is_set() and self._deadline is not None and time.monotonic() >= self._deadline:
            self._stop.set()
        return self._stop.is_set()

    def run(self, seed: str) -> CrawlStats:
        """Crawl from seed and return the collected statistics."""
        if normalize_url(seed) is None:
            raise ValueError(f"Invalid start URL: {seed}")

        if self.config.deadline_s is not None:
            self._deadline = time.monotonic() + self.config.deadline_s

        stats = CrawlStats()
        frontier = [seed]
        depth = 0

        with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
            while frontier and depth <= self.config.max_depth:
                if self.cancelled:
                    break
                frontier = self._run_level(pool, frontier, depth, stats)
                depth += 1

        stats.cancelled = self.cancelled
        return stats

    def _run_level(
        self,
        pool: ThreadPoolExecutor,
        frontier: List[str],
        depth: int,
        stats: CrawlStats,
    ) -> List[str]:
        previous_keys = self.store.list_level(depth - 1) if self.config.uniqueness else set()

        futures: List[Future[PageVisit]] = []
        for url, key in self._schedule(frontier, stats):
            futures.append(pool.submit(self._visit, url, key, depth, previous_keys))

        children: List[str] = []
        # Collected in submission order so the next frontier is deterministic
        for future in futures:
            try:
                visit = future.result()
            except BaseException:
                self.cancel()
                for pending in futures:
                    pending.cancel()
                raise
            stats.record_visit(visit)
            if self.progress:
                print_scan_line(visit)
            children.extend(visit.children)
        return children

    def _schedule(self, frontier: List[str], stats: CrawlStats) -> List[Tuple[str, str]]:
        """Normalize a frontier and drop entries whose key is already taken."""
        scheduled: List[Tuple[str, str]] = []
        seen: Set[str] = set()
        for raw in frontier:
            url = normalize_url(raw)
            if url is None:
                stats.skipped_invalid += 1
                continue
            key = encode_filename(url)
            if key in seen:
                stats.skipped_duplicate += 1
                continue
            seen.add(key)
            scheduled.append((url, key))
        return scheduled

    def _visit(self, url: str, key: str, depth: int, previous_keys: Set[str]) -> PageVisit:
        visit = PageVisit(url=url, depth=depth, key=key)
        if self.cancelled:
            visit.skipped = True
            return visit

        try:
            self.store.ensure_level(depth)
            html = self.fetcher.fetch(url)
            self.store.put(depth, key, html)
        except CrawlError as e:
            if self.config.fail_fast:
                raise
            kind = "fetch" if isinstance(e, FetchError) else "store"
            visit.failure = CrawlFailure(url=url, depth=depth, kind=kind, message=str(e))
            return visit

        links = extract_links(html)
        visit.links_extracted = len(links)

        if self.config.uniqueness:
            unique = filter_unique(links, previous_keys)
            visit.links_filtered = len(links) - len(unique)
            links = unique

        selected = limit_links(links, self.config.max_fanout)
        visit.links_capped = len(links) - len(selected)

        if depth < self.config.max_depth:
            visit.children = selected
        return visit


def crawl(
    start_url: str,
    config: CrawlConfig,
    fetcher: Optional[Fetcher] = None,
    store: Optional[DepthStore] = None,
    output_dir: Union[str, Path] = ".",
    progress: bool = False,
) -> CrawlStats:
    """
    Crawl from start_url and persist every page by depth.

    Args:
        start_url: Seed URL, normalized before use.
        config: Fan-out, depth and concurrency limits.
        fetcher: Page source; a RequestsFetcher built from config by default.
        store: Page sink; a FileDepthStore rooted at output_dir by default.
        output_dir: Root directory for the default store.
        progress: Whether to print one line per page to stderr.

    Returns:
        Crawl statistics, including per-branch failures.
    """
    if store is None:
        store = FileDepthStore(output_dir)
    if fetcher is not None:
        return Crawler(config, fetcher, store, progress=progress).run(start_url)

    with RequestsFetcher(user_agent=config.user_agent, timeout_s=config.timeout_s) as owned:
        return Crawler(config, owned, store, progress=progress).run(start_url)
