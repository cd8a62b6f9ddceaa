"""File operations that change directory contents.

Each operation reports the directories whose listing changed in
``MutationResult.affected_dirs`` so callers can invalidate cached
listings. Only directories are reported, never the file paths themselves.
"""

import errno
import logging
import os
import shutil
from typing import Iterable

from dirlens.models import MutationResult

LOGGER = logging.getLogger(__name__)

ALREADY_EXISTS = "ALREADY_EXISTS"
SOME_FAILED = "SOME_FAILED"


def parent_dir(path: str) -> str:
    """Absolute parent directory of path."""
    return os.path.dirname(os.path.abspath(path))


def remove_path(path: str) -> None:
    """Delete a file, symlink or directory tree."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def copy_path(src: str, dest: str) -> None:
    """Copy a file or directory tree, preserving metadata and symlinks."""
    if os.path.isdir(src) and not os.path.islink(src):
        shutil.copytree(src, dest, symlinks=True)
    else:
        shutil.copy2(src, dest, follow_symlinks=False)


def delete_items(paths: Iterable[str]) -> MutationResult:
    """
    Delete several paths, continuing past individual failures.

    Paths that are already gone count as deleted.
    """
    affected: set[str] = set()
    failed: list[dict[str, str]] = []

    for path in paths:
        try:
            remove_path(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            LOGGER.debug("Cannot delete %s: %s", path, e)
            failed.append({"path": path, "error": str(e)})
            continue
        affected.add(parent_dir(path))

    return MutationResult(
        success=not failed,
        error=SOME_FAILED if failed else None,
        failed=failed,
        affected_dirs=sorted(affected),
    )


def rename_item(old_path: str, new_path: str) -> MutationResult:
    """Rename (or move) a single path."""
    try:
        os.rename(old_path, new_path)
    except OSError as e:
        return MutationResult(success=False, error=str(e))
    return MutationResult(affected_dirs=sorted({parent_dir(old_path), parent_dir(new_path)}))


def move_items(paths: Iterable[str], dest_dir: str) -> MutationResult:
    """
    Move paths into dest_dir without overwriting.

    Falls back to copy and delete when source and destination are on
    different devices. Stops at the first conflict or failure. Moves done
    before that, and the directories a failed move touched, are still
    reported in ``affected_dirs``.
    """
    dest_dir = os.path.abspath(dest_dir)
    affected: set[str] = set()

    def result(**kwargs) -> MutationResult:
        if affected:
            affected.add(dest_dir)
        return MutationResult(affected_dirs=sorted(affected), **kwargs)

    for src in paths:
        name = os.path.basename(os.path.normpath(src))
        dest = os.path.join(dest_dir, name)
        if os.path.lexists(dest):
            return result(success=False, error=ALREADY_EXISTS, details=name)
        try:
            try:
                os.rename(src, dest)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                copy_path(src, dest)
                remove_path(src)
        except OSError as e:
            # A failed copy fallback may have left both sides half done
            affected.add(parent_dir(src))
            return result(success=False, error=str(e), details=name)
        affected.add(parent_dir(src))

    return result()


def copy_items(paths: Iterable[str], dest_dir: str) -> MutationResult:
    """Copy paths into dest_dir without overwriting."""
    dest_dir = os.path.abspath(dest_dir)
    copied = False

    for src in paths:
        name = os.path.basename(os.path.normpath(src))
        dest = os.path.join(dest_dir, name)
        if os.path.lexists(dest):
            return MutationResult(
                success=False,
                error=ALREADY_EXISTS,
                details=name,
                affected_dirs=[dest_dir] if copied else [],
            )
        try:
            copy_path(src, dest)
        except OSError as e:
            # A partial tree copy still changes dest_dir
            return MutationResult(
                success=False,
                error=str(e),
                details=name,
                affected_dirs=[dest_dir],
            )
        copied = True

    return MutationResult(affected_dirs=[dest_dir] if copied else [])


def create_folder(path: str) -> MutationResult:
    """Create a directory (and missing parents)."""
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        return MutationResult(success=False, error=str(e))
    return MutationResult(affected_dirs=[parent_dir(path)])
