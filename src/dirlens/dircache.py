"""Time-limited cache of directory listings."""

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from dirlens.models import DirectoryEntry

LOGGER = logging.getLogger(__name__)

CACHE_TTL = 5.0  # seconds
MAX_CACHE_SIZE = 50


def cache_key(path: str) -> str:
    """Normalise a directory path into a cache key."""
    return os.path.abspath(os.path.expanduser(path))


@dataclass(frozen=True)
class DirectoryCacheRecord:
    """A cached listing. Replaced on refresh, never mutated."""

    path: str
    entries: tuple[DirectoryEntry, ...]
    cached_at: float


class DirectoryCache:
    """
    Directory listings keyed by path.

    Entries are served only while younger than ``ttl``; stale entries are
    a miss. When full, the oldest inserted path is evicted before a new
    one is added (insertion order, not access order).
    """

    def __init__(
        self,
        ttl: float = CACHE_TTL,
        max_size: int = MAX_CACHE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._records: dict[str, DirectoryCacheRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: str) -> bool:
        return cache_key(path) in self._records

    def paths(self) -> list[str]:
        """Cached paths, oldest insertion first."""
        return list(self._records)

    def get(self, path: str) -> Optional[list[DirectoryEntry]]:
        """Get fresh entries for path, or None on a miss."""
        record = self._records.get(cache_key(path))
        if record is None:
            return None
        if self._clock() - record.cached_at >= self.ttl:
            LOGGER.debug("Stale listing for %s", record.path)
            return None
        return list(record.entries)

    def put(self, path: str, entries: Iterable[DirectoryEntry]) -> None:
        """Store entries for path, evicting the oldest path if full."""
        key = cache_key(path)
        # Overwriting keeps the path's original insertion position
        if key not in self._records and len(self._records) >= self.max_size:
            oldest = next(iter(self._records))
            del self._records[oldest]
            LOGGER.debug("Evicted listing for %s", oldest)
        self._records[key] = DirectoryCacheRecord(
            path=key, entries=tuple(entries), cached_at=self._clock()
        )

    def invalidate(self, path: str) -> bool:
        """Drop the listing for path. Returns whether one was cached."""
        return self._records.pop(cache_key(path), None) is not None

    def invalidate_many(self, paths: Iterable[str]) -> list[str]:
        """Drop several listings. Returns the normalised keys dropped."""
        dropped = []
        for path in paths:
            if self.invalidate(path):
                dropped.append(cache_key(path))
        return dropped

    def clear(self) -> None:
        """Drop every listing."""
        self._records.clear()
