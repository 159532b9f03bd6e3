"""
Depth-bounded web crawler that saves every fetched page under a folder per depth.
"""
from depthcrawl.core import CrawlConfig, CrawlFailure, Crawler, CrawlStats, crawl
from depthcrawl.errors import CrawlError, FetchError, StoreError
from depthcrawl.fetcher import Fetcher, RequestsFetcher
from depthcrawl.links import extract_links
from depthcrawl.store import DepthStore, FileDepthStore, MemoryDepthStore
from depthcrawl.urls import encode_filename, normalize_url

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "Crawler",
    "CrawlConfig",
    "CrawlFailure",
    "CrawlStats",
    "CrawlError",
    "FetchError",
    "StoreError",
    "Fetcher",
    "RequestsFetcher",
    "DepthStore",
    "FileDepthStore",
    "MemoryDepthStore",
    "extract_links",
    "encode_filename",
    "normalize_url",
]
