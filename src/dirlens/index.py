"""The file index: cached listings, subtree scans and app enumeration.

``FileIndex`` is what a file browser talks to. It owns one directory
listing cache, one duplicate group store and one installed applications
cache, and funnels identical concurrent requests through a single-flight
coalescer. All of its state is meant to be used from one event loop.
"""

import asyncio
import functools
import logging
from typing import Iterable, Optional

from dirlens import listing, mutations, stats
from dirlens.apps import InstalledAppsCache
from dirlens.coalescer import SingleFlight
from dirlens.config import Settings
from dirlens.dircache import DirectoryCache, cache_key
from dirlens.models import (
    DirectoryEntry,
    DuplicatePage,
    InstalledApp,
    MutationResult,
    ScanResult,
)
from dirlens.results import DuplicateStore

LOGGER = logging.getLogger(__name__)


class FileIndex:
    """Boundary operations of the indexing and caching core."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        apps: Optional[InstalledAppsCache] = None,
    ):
        self.settings = settings or Settings()
        self.flights = SingleFlight()
        self.cache = DirectoryCache(
            ttl=self.settings.cache_ttl,
            max_size=self.settings.max_cache_size,
        )
        self.duplicates = DuplicateStore(retained=self.settings.retained_scans)
        self.apps = apps or InstalledAppsCache(
            self.settings.apps_cache_file,
            fresh_for=self.settings.apps_fresh_for,
            timeout=self.settings.apps_timeout,
            flights=self.flights,
        )
        # Bumped when an invalidation lands while a listing is in flight
        self._generations: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        """
        List a directory, served from cache within the TTL.

        Raises:
            DirectoryReadError: The directory itself could not be read
        """
        key = cache_key(path)
        cached = self.cache.get(key)
        if cached is not None:
            LOGGER.debug("Listing cache hit for %s", key)
            return cached
        return await self.flights.run(f"list:{key}", functools.partial(self._load_directory, key))

    async def _load_directory(self, key: str) -> list[DirectoryEntry]:
        generation = self._generations.get(key, 0)
        try:
            entries = await listing.list_directory(key, batch_size=self.settings.stat_batch_size)
        finally:
            stale = self._generations.pop(key, 0) != generation
        if not stale:
            self.cache.put(key, entries)
        return entries

    def invalidate_directory(self, path: str) -> None:
        """Forget the cached listing of a directory whose contents changed."""
        key = cache_key(path)
        if self.flights.in_flight(f"list:{key}"):
            self._generations[key] = self._generations.get(key, 0) + 1
        if self.cache.invalidate(key):
            LOGGER.debug("Invalidated listing for %s", key)

    def invalidate_directories(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.invalidate_directory(path)

    async def search(self, path: str, query: str, limit: int = listing.SEARCH_LIMIT) -> list[DirectoryEntry]:
        """Find entries under path whose name contains query."""
        return await listing.search_entries(path, query, limit)

    # ------------------------------------------------------------------
    # Subtree statistics
    # ------------------------------------------------------------------

    async def scan_subtree(self, path: str) -> ScanResult:
        """
        Compute statistics for a subtree.

        Concurrent scans of the same root share one walk. The full list of
        duplicate groups is retained for get_duplicate_page.

        Raises:
            DirectoryReadError: The root itself could not be read
        """
        root = cache_key(path)
        return await self.flights.run(f"scan:{root}", functools.partial(self._scan, root))

    async def _scan(self, root: str) -> ScanResult:
        scan = await stats.scan_tree(root, self.settings)
        self.duplicates.set_last(scan.groups, scan.result.scan_id)
        LOGGER.debug(
            "Scanned %s: %d files, %d duplicate groups",
            root,
            scan.result.file_count,
            len(scan.groups),
        )
        return scan.result

    def get_duplicate_page(
        self,
        page_index: int,
        page_size: int,
        scan_id: Optional[str] = None,
    ) -> DuplicatePage:
        """Page through the duplicate groups of a scan (latest by default)."""
        return self.duplicates.page(page_index, page_size, scan_id)

    # ------------------------------------------------------------------
    # Installed applications
    # ------------------------------------------------------------------

    async def get_installed_apps(self, force: bool = False) -> list[InstalledApp]:
        return await self.apps.get(force=force)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _mutate(self, operation, *args) -> MutationResult:
        result = await asyncio.to_thread(operation, *args)
        self.invalidate_directories(result.affected_dirs)
        return result

    async def delete(self, paths: list[str]) -> MutationResult:
        return await self._mutate(mutations.delete_items, list(paths))

    async def rename(self, old_path: str, new_path: str) -> MutationResult:
        return await self._mutate(mutations.rename_item, old_path, new_path)

    async def move(self, paths: list[str], dest_dir: str) -> MutationResult:
        return await self._mutate(mutations.move_items, list(paths), dest_dir)

    async def copy(self, paths: list[str], dest_dir: str) -> MutationResult:
        return await self._mutate(mutations.copy_items, list(paths), dest_dir)

    async def mkdir(self, path: str) -> MutationResult:
        return await self._mutate(mutations.create_folder, path)
