import threading
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from depthcrawl.errors import FetchError
from depthcrawl.store import MemoryDepthStore

SEED = "example.com"
SEED_URL = "https://www.example.com"


def html_page(*links: str) -> str:
    """Build a minimal HTML page linking to every entry of *links*."""
    anchors = "".join(f'<a href="{link}">{i}</a>' for i, link in enumerate(links))
    return f"<html><body>{anchors}</body></html>"


class StubFetcher:
    """In-memory fetcher that records every requested URL."""

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        default: str = "",
        failing: Iterable[str] = (),
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.default = default
        self.failing = set(failing)
        self.on_fetch = on_fetch
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
        if self.on_fetch is not None:
            self.on_fetch(url)
        if url in self.failing:
            raise FetchError(url, "connection refused")
        return self.pages.get(url, self.default)


@pytest.fixture()
def page() -> Callable[..., str]:
    """Return the HTML page builder."""
    return html_page


@pytest.fixture()
def make_fetcher() -> Callable[..., StubFetcher]:
    """Return a factory for StubFetcher instances."""
    return StubFetcher


@pytest.fixture()
def memory_store() -> MemoryDepthStore:
    return MemoryDepthStore()
