"""Directory listing on top of raw filesystem primitives.

Blocking calls (``os.scandir``, ``os.stat``) run in worker threads so the
event loop stays responsive. Stat calls are issued in fixed-size batches:
concurrent inside a batch, sequential across batches, which bounds the
number of files held open at once.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dirlens.errors import wrap_os_error
from dirlens.models import DirectoryEntry

LOGGER = logging.getLogger(__name__)

STAT_BATCH_SIZE = 100
SEARCH_LIMIT = 50


@dataclass(frozen=True)
class RawEntry:
    """Name and type of a directory entry, before stat."""

    name: str
    is_dir: bool


def read_entries(path: str) -> list[RawEntry]:
    """Read the names and types of a directory's entries."""
    result = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            result.append(RawEntry(name=entry.name, is_dir=is_dir))
    return result


def stat_entry(path: str) -> os.stat_result:
    """Stat a single path, following symlinks."""
    return os.stat(path)


def created_time(st: os.stat_result) -> float:
    """Creation time where the platform records one, else ctime."""
    return getattr(st, "st_birthtime", st.st_ctime)


def entry_from_stat(name: str, path: str, is_dir: bool, st: os.stat_result) -> DirectoryEntry:
    return DirectoryEntry(
        name=name,
        path=path,
        is_directory=is_dir,
        size=st.st_size,
        modified_at=st.st_mtime,
        created_at=created_time(st),
    )


async def _stat_one(directory: str, raw: RawEntry) -> Optional[DirectoryEntry]:
    path = os.path.join(directory, raw.name)
    try:
        st = await asyncio.to_thread(stat_entry, path)
    except FileNotFoundError:
        # Dangling symlinks are still shown; vanished entries are dropped
        if not await asyncio.to_thread(os.path.lexists, path):
            LOGGER.debug("Entry vanished before stat: %s", path)
            return None
        return DirectoryEntry(name=raw.name, path=path, is_directory=raw.is_dir, read_error=True)
    except OSError as e:
        LOGGER.debug("Cannot stat %s: %s", path, e)
        return DirectoryEntry(name=raw.name, path=path, is_directory=raw.is_dir, read_error=True)
    return entry_from_stat(raw.name, path, raw.is_dir, st)


async def list_directory(path: str, batch_size: int = STAT_BATCH_SIZE) -> list[DirectoryEntry]:
    """
    List a directory with per-entry metadata.

    Args:
        path: Directory to list
        batch_size: Number of entries stat'ed concurrently

    Returns:
        Entries in directory read order. Entries whose stat failed are
        kept with ``read_error=True`` and ``size=0``.

    Raises:
        DirectoryReadError: The directory itself could not be read
    """
    directory = os.path.abspath(path)
    try:
        raw_entries = await asyncio.to_thread(read_entries, directory)
    except OSError as e:
        raise wrap_os_error(directory, e) from e

    results: list[DirectoryEntry] = []
    for start in range(0, len(raw_entries), batch_size):
        batch = raw_entries[start : start + batch_size]
        batch_results = await asyncio.gather(*(_stat_one(directory, raw) for raw in batch))
        results.extend(entry for entry in batch_results if entry is not None)
    return results


def find_entries(root: str, query: str, limit: int = SEARCH_LIMIT) -> list[DirectoryEntry]:
    """
    Find entries whose name contains query (case-insensitive).

    Depth-first, stops once ``limit`` matches are found. Unreadable
    subdirectories are skipped; an unreadable root raises.
    """
    needle = query.lower()
    matches: list[DirectoryEntry] = []

    try:
        with os.scandir(root) as it:
            top = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise wrap_os_error(root, e) from e

    stack = [iter(top)]
    while stack and len(matches) < limit:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if needle in entry.name.lower():
            try:
                matches.append(entry_from_stat(entry.name, entry.path, is_dir, entry.stat()))
            except OSError:
                pass
        if is_dir:
            try:
                with os.scandir(entry.path) as it:
                    stack.append(iter(sorted(it, key=lambda e: e.name)))
            except OSError:
                continue
    return matches


async def search_entries(root: str, query: str, limit: int = SEARCH_LIMIT) -> list[DirectoryEntry]:
    """Async wrapper around find_entries."""
    return await asyncio.to_thread(find_entries, os.path.abspath(root), query, limit)
