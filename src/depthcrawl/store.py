"""
Depth-keyed page storage.

Pages are stored under a (depth, key) pair. A level that was never written
to simply lists as empty.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Protocol, Set, Union

from depthcrawl.errors import StoreError
from depthcrawl.urls import PAGE_SUFFIX

log = logging.getLogger("depthcrawl")


class DepthStore(Protocol):
    """Persistence for fetched pages, partitioned by crawl depth."""

    def ensure_level(self, depth: int) -> None:
        """Create the partition for depth if it does not exist yet."""
        ...

    def put(self, depth: int, key: str, content: str) -> None:
        """Store content under (depth, key), replacing any previous value."""
        ...

    def get(self, depth: int, key: str) -> str:
        """Return the content stored under (depth, key)."""
        ...

    def list_level(self, depth: int) -> Set[str]:
        """Return the keys stored at depth."""
        ...


class FileDepthStore:
    """Stores each level as a directory named after the depth."""

    def __init__(self, root: Union[str, Path] = ".") -> None:
        self.root = Path(root)

    def level_dir(self, depth: int) -> Path:
        return self.root / str(depth)

    def ensure_level(self, depth: int) -> None:
        path = self.level_dir(depth)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(depth, "", f"cannot create {path}: {e}") from e

    def put(self, depth: int, key: str, content: str) -> None:
        path = self.level_dir(depth) / key
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StoreError(depth, key, str(e)) from e
        log.debug("Saved -> %s (%d chars)", path, len(content))

    def get(self, depth: int, key: str) -> str:
        path = self.level_dir(depth) / key
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(depth, key, str(e)) from e

    def list_level(self, depth: int) -> Set[str]:
        if depth < 0:
            return set()
        path = self.level_dir(depth)
        if not path.is_dir():
            return set()
        return {p.name for p in path.glob(f"*{PAGE_SUFFIX}")}


class MemoryDepthStore:
    """In-process store, safe to share between worker threads."""

    def __init__(self) -> None:
        self._levels: Dict[int, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def ensure_level(self, depth: int) -> None:
        with self._lock:
            self._levels.setdefault(depth, {})

    def put(self, depth: int, key: str, content: str) -> None:
        with self._lock:
            self._levels.setdefault(depth, {})[key] = content

    def get(self, depth: int, key: str) -> str:
        with self._lock:
            try:
                return self._levels.get(depth, {})[key]
            except KeyError:
                raise StoreError(depth, key, "no such page") from None

    def list_level(self, depth: int) -> Set[str]:
        with self._lock:
            return set(self._levels.get(depth, {}))

    def levels(self) -> Dict[int, Set[str]]:
        """Snapshot of every level that has been created."""
        with self._lock:
            return {depth: set(pages) for depth, pages in self._levels.items()}
