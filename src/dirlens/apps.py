"""Installed applications cache, persisted across sessions.

Enumerating applications is slow, so results are kept in memory and in a
JSON file. Fresh data is served directly; stale data is served while a
background refresh runs; an empty cache (or a forced refresh) waits for
the refresh, but never longer than ``timeout`` when there is something
to fall back to.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from dirlens.coalescer import SingleFlight
from dirlens.models import InstalledApp, InstalledAppsSnapshot
from dirlens.platform_apps import enumerate_installed_applications

LOGGER = logging.getLogger(__name__)

APPS_KEY = "installed-apps"
APPS_FRESH_FOR = 5 * 60  # seconds
APPS_TIMEOUT = 12.0  # seconds


class InstalledAppsCache:
    """In-memory and on-disk cache of the installed applications list."""

    def __init__(
        self,
        cache_file: Path,
        enumerate_apps: Callable[[], list[InstalledApp]] = enumerate_installed_applications,
        fresh_for: float = APPS_FRESH_FOR,
        timeout: float = APPS_TIMEOUT,
        flights: Optional[SingleFlight] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_file = Path(cache_file)
        self.fresh_for = fresh_for
        self.timeout = timeout
        self.snapshot = InstalledAppsSnapshot()
        self._enumerate = enumerate_apps
        self._flights = flights or SingleFlight()
        self._clock = clock
        self._loaded = False

    @property
    def data(self) -> list[InstalledApp]:
        return self.snapshot.data

    @property
    def refreshing(self) -> bool:
        """Whether a refresh is in flight."""
        return self._flights.in_flight(APPS_KEY)

    def is_fresh(self) -> bool:
        """Non-empty and fetched within ``fresh_for`` seconds."""
        return bool(self.snapshot.data) and self._clock() - self.snapshot.fetched_at < self.fresh_for

    async def load(self) -> None:
        """Seed the in-memory cache from disk, once per instance."""
        if self._loaded:
            return
        self._loaded = True
        snapshot = await asyncio.to_thread(self.read_snapshot)
        if snapshot is not None and not self.snapshot.data:
            self.snapshot = snapshot

    def read_snapshot(self) -> Optional[InstalledAppsSnapshot]:
        """Read the persisted snapshot; None when missing or unreadable."""
        try:
            raw = self.cache_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            LOGGER.debug("Cannot read %s: %s", self.cache_file, e)
            return None
        try:
            return InstalledAppsSnapshot.model_validate_json(raw)
        except ValidationError as e:
            LOGGER.debug("Ignoring malformed %s: %s", self.cache_file, e)
            return None

    def save(self) -> None:
        """Persist the snapshot. Failures are logged and ignored."""
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(self.snapshot.model_dump_json(), encoding="utf-8")
        except OSError as e:
            LOGGER.debug("Cannot write %s: %s", self.cache_file, e)

    async def _refresh(self) -> list[InstalledApp]:
        try:
            apps = await asyncio.to_thread(self._enumerate)
        except Exception as e:
            LOGGER.warning("Installed applications scan failed: %s", e)
            raise
        self.snapshot = InstalledAppsSnapshot(data=apps, fetched_at=self._clock())
        await asyncio.to_thread(self.save)
        LOGGER.debug("Cached %d installed applications", len(apps))
        return apps

    def start_refresh(self) -> asyncio.Task:
        """Start a refresh unless one is already running."""
        return self._flights.start(APPS_KEY, self._refresh)

    async def get(self, force: bool = False) -> list[InstalledApp]:
        """
        Get the installed applications.

        Args:
            force: Refresh even if the cache is fresh

        Returns:
            List of InstalledApp, possibly stale

        Raises:
            Exception: The scan failed and there was no cached list to serve
        """
        await self.load()

        if not force and self.snapshot.data:
            if not self.is_fresh():
                self.start_refresh()
            return list(self.snapshot.data)

        task = self.start_refresh()
        try:
            return list(await asyncio.wait_for(asyncio.shield(task), self.timeout))
        except asyncio.TimeoutError:
            if not self.snapshot.data:
                # Nothing to fall back to: wait for the scan without a deadline
                return list(await asyncio.shield(task))
            LOGGER.debug("Applications scan still running, serving cached list")
        except Exception:
            if not self.snapshot.data:
                raise
        return list(self.snapshot.data)
