"""
HTTP fetching on top of requests.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests
from urllib3.exceptions import LocationParseError

from depthcrawl.errors import FetchError

log = logging.getLogger("depthcrawl")

# Browser identity sent by default; some sites refuse unknown clients
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
)
DEFAULT_TIMEOUT = 15.0


class Fetcher(Protocol):
    """Anything that can turn a URL into page text."""

    def fetch(self, url: str) -> str:
        ...


class RequestsFetcher:
    """
    Fetch pages with a shared requests.Session.

    Redirects are followed, there are no retries, and the body is returned
    whatever the status code.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
        except (requests.RequestException, LocationParseError) as e:
            raise FetchError(url, str(e)) from e
        except ValueError as e:
            # Hosts urlsplit accepts but IDNA encoding rejects
            raise FetchError(url, f"invalid URL: {e}") from e
        log.debug("GET %s -> %s (%d bytes)", url, resp.status_code, len(resp.content))
        return resp.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> RequestsFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
