"""Subtree statistics for the disk analyzer.

One depth-first walk computes everything the analyzer shows: category
totals, the largest and most recently modified files, cleanup candidates
and duplicate groups.

Duplicates are matched on ``(size, basename)`` only. No file content is
read, so two unrelated files that share a name and size are reported as
duplicates, and identical files with different names are not.
"""

import asyncio
import os
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from dirlens.categories import categorize, empty_buckets, extension_of, is_redundant
from dirlens.config import Settings
from dirlens.errors import wrap_os_error
from dirlens.models import FileRef, ScanResult

DuplicateKey = tuple[int, str]


@dataclass
class TreeScan:
    """A scan summary plus the full duplicate group list."""

    result: ScanResult
    groups: list[list[str]] = field(default_factory=list)


def new_scan_id() -> str:
    return uuid.uuid4().hex[:12]


def _scan_sorted(path: str) -> list[os.DirEntry]:
    # Name order keeps repeated scans of an unchanged tree identical
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def finalize_duplicates(
    candidates: dict[DuplicateKey, list[str]],
) -> tuple[list[list[str]], int, int]:
    """
    Turn the (size, name) multimap into duplicate groups.

    Groups are ordered by reclaimable bytes, largest first; ties keep the
    order in which the key was first seen.

    Returns:
        Tuple of (groups, duplicate_count, duplicate_size)
    """
    found = [(size, paths) for (size, _), paths in candidates.items() if len(paths) > 1]
    found.sort(key=lambda item: item[0] * (len(item[1]) - 1), reverse=True)

    groups = [paths for _, paths in found]
    duplicate_count = sum(len(paths) for paths in groups)
    duplicate_size = sum(size * (len(paths) - 1) for size, paths in found)
    return groups, duplicate_count, duplicate_size


def walk_tree(root: str, settings: Settings, now: float, scan_id: str) -> TreeScan:
    """
    Walk root and compute all aggregates in a single pass.

    Blocking; run it in a worker thread.

    Raises:
        DirectoryReadError: root itself could not be read
    """
    try:
        top = _scan_sorted(root)
    except OSError as e:
        raise wrap_os_error(root, e) from e

    categories = empty_buckets()
    candidates: dict[DuplicateKey, list[str]] = {}
    large: list[FileRef] = []
    recent: list[FileRef] = []
    redundant: list[str] = []
    redundant_size = 0
    total_size = 0
    file_count = 0
    dir_count = 0
    skipped_dirs = 0

    stack = [iter(top)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            if entry.is_dir(follow_symlinks=False):
                try:
                    children = _scan_sorted(entry.path)
                except OSError:
                    # Unreadable subtree is left out of every aggregate
                    skipped_dirs += 1
                    continue
                dir_count += 1
                stack.append(iter(children))
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            st = entry.stat(follow_symlinks=False)
        except OSError:
            continue

        size = st.st_size
        name = entry.name
        ext = extension_of(name)

        total_size += size
        file_count += 1

        bucket = categories[categorize(ext)]
        bucket.size += size
        bucket.count += 1

        candidates.setdefault((size, name), []).append(entry.path)

        if size > settings.large_file_threshold or now - st.st_mtime < settings.recent_window:
            ref = FileRef(name=name, path=entry.path, size=size, modified_at=st.st_mtime)
            if size > settings.large_file_threshold:
                large.append(ref)
            if now - st.st_mtime < settings.recent_window:
                recent.append(ref)

        if is_redundant(ext, size):
            redundant.append(entry.path)
            redundant_size += size

    large.sort(key=lambda f: f.size, reverse=True)
    recent.sort(key=lambda f: f.modified_at, reverse=True)
    groups, duplicate_count, duplicate_size = finalize_duplicates(candidates)

    result = ScanResult(
        scan_id=scan_id,
        root=root,
        total_size=total_size,
        file_count=file_count,
        dir_count=dir_count,
        skipped_dirs=skipped_dirs,
        categories=categories,
        large_files=large[: settings.top_files_limit],
        recent_files=recent[: settings.top_files_limit],
        redundant_files=redundant,
        redundant_count=len(redundant),
        redundant_size=redundant_size,
        duplicate_groups=groups[: settings.duplicate_preview_limit],
        duplicate_group_count=len(groups),
        duplicate_count=duplicate_count,
        duplicate_size=duplicate_size,
    )
    return TreeScan(result=result, groups=groups)


async def scan_tree(
    root: str,
    settings: Optional[Settings] = None,
    now: Optional[float] = None,
) -> TreeScan:
    """
    Scan a subtree without blocking the event loop.

    Args:
        root: Directory to scan
        settings: Thresholds and limits (default: Settings())
        now: Reference time for the recent-files window (default: now)

    Returns:
        TreeScan with the summary and the full duplicate group list
    """
    return await asyncio.to_thread(
        walk_tree,
        os.path.abspath(root),
        settings or Settings(),
        time.time() if now is None else now,
        new_scan_id(),
    )
