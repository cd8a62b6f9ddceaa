"""Tests for subtree statistics."""

import os
import time
from unittest.mock import patch

import pytest

from dirlens.config import Settings
from dirlens.errors import DirectoryNotFoundError
from dirlens.models import Bucket
from dirlens.stats import _scan_sorted, finalize_duplicates, scan_tree, walk_tree

NOW = 2_000_000_000.0
OLD = NOW - 10 * 24 * 60 * 60


def write(path, size: int, mtime: float = OLD):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def settings():
    return Settings(large_file_threshold=2000, top_files_limit=2, duplicate_preview_limit=2)


@pytest.fixture
def tree(tmp_path):
    write(tmp_path / "a" / "report.pdf", 1000)
    write(tmp_path / "b" / "report.pdf", 1000)
    write(tmp_path / "c" / "deep" / "report.pdf", 1000)
    write(tmp_path / "photo.JPG", 500, mtime=NOW - 60)
    write(tmp_path / "movie.mkv", 5000)
    write(tmp_path / "huge.iso", 9000, mtime=NOW - 3600)
    write(tmp_path / "debug.log", 10)
    write(tmp_path / "empty.dat", 0)
    return tmp_path


def scan(root, settings):
    return walk_tree(str(root), settings, NOW, "test-scan")


class TestWalkTree:
    def test_totals(self, tree, settings):
        result = scan(tree, settings).result
        assert result.total_size == 3000 + 500 + 5000 + 9000 + 10
        assert result.file_count == 8
        assert result.dir_count == 4  # a, b, c, c/deep
        assert result.root == str(tree)
        assert result.scan_id == "test-scan"

    def test_categories(self, tree, settings):
        categories = scan(tree, settings).result.categories
        assert categories[Bucket.DOCS].count == 3
        assert categories[Bucket.DOCS].size == 3000
        assert categories[Bucket.IMAGES].count == 1  # Extension match is case-insensitive
        assert categories[Bucket.VIDEOS].size == 5000
        assert categories[Bucket.OTHERS].count == 3  # iso, log, dat
        assert categories[Bucket.AUDIO].count == 0
        assert list(categories) == list(Bucket)

    def test_large_files_sorted_and_limited(self, tree, settings):
        large = scan(tree, settings).result.large_files
        assert [f.name for f in large] == ["huge.iso", "movie.mkv"]

    def test_large_threshold_is_exclusive(self, tmp_path):
        write(tmp_path / "edge.bin", 2000)
        settings = Settings(large_file_threshold=2000)
        assert scan(tmp_path, settings).result.large_files == []

    def test_recent_files(self, tree, settings):
        recent = scan(tree, settings).result.recent_files
        assert [f.name for f in recent] == ["photo.JPG", "huge.iso"]

    def test_redundant_files(self, tree, settings):
        result = scan(tree, settings).result
        names = sorted(os.path.basename(p) for p in result.redundant_files)
        assert names == ["debug.log", "empty.dat"]
        assert result.redundant_count == 2
        assert result.redundant_size == 10

    def test_duplicate_group(self, tree, settings):
        scan_result = scan(tree, settings)
        result = scan_result.result

        assert len(scan_result.groups) == 1
        group = scan_result.groups[0]
        assert len(group) == 3
        assert all(p.endswith("report.pdf") for p in group)
        assert result.duplicate_count == 3
        assert result.duplicate_size == 2000  # Two reclaimable copies, not three

    def test_same_name_different_size_is_not_duplicate(self, tmp_path, settings):
        write(tmp_path / "x" / "data.bin", 10)
        write(tmp_path / "y" / "data.bin", 11)
        result = scan(tmp_path, settings).result
        assert result.duplicate_groups == []
        assert result.duplicate_count == 0

    def test_preview_is_limited_but_full_list_kept(self, tmp_path, settings):
        for i in range(5):
            write(tmp_path / "one" / f"f{i}.bin", 100 + i)
            write(tmp_path / "two" / f"f{i}.bin", 100 + i)

        scan_result = scan(tmp_path, settings)
        assert len(scan_result.groups) == 5
        assert len(scan_result.result.duplicate_groups) == 2
        assert scan_result.result.duplicate_group_count == 5

    def test_groups_ordered_by_reclaimable_size(self, tmp_path, settings):
        write(tmp_path / "one" / "small.bin", 10)
        write(tmp_path / "two" / "small.bin", 10)
        write(tmp_path / "one" / "big.bin", 500)
        write(tmp_path / "two" / "big.bin", 500)

        groups = scan(tmp_path, settings).groups
        assert os.path.basename(groups[0][0]) == "big.bin"

    def test_repeat_scan_is_identical(self, tree, settings):
        first = scan(tree, settings)
        second = scan(tree, settings)
        assert first.groups == second.groups
        assert first.result.duplicate_count == second.result.duplicate_count
        assert first.result.duplicate_size == second.result.duplicate_size

    def test_unreadable_subtree_is_skipped(self, tree, settings):
        blocked = str(tree / "c")

        def guarded(path):
            if path == blocked:
                raise PermissionError("denied")
            return _scan_sorted(path)

        with patch("dirlens.stats._scan_sorted", side_effect=guarded):
            scan_result = scan(tree, settings)

        result = scan_result.result
        assert result.skipped_dirs == 1
        assert result.categories[Bucket.DOCS].count == 2
        assert result.duplicate_size == 1000

    def test_symlinks_are_not_followed(self, tmp_path, settings):
        write(tmp_path / "real" / "file.txt", 100)
        os.symlink(tmp_path / "real", tmp_path / "alias")
        result = scan(tmp_path, settings).result
        assert result.file_count == 1
        assert result.duplicate_groups == []

    def test_missing_root_raises(self, tmp_path, settings):
        with pytest.raises(DirectoryNotFoundError):
            scan(tmp_path / "missing", settings)

    def test_deep_tree(self, tmp_path, settings):
        deep = tmp_path
        for i in range(200):
            deep = deep / f"d{i}"
        write(deep / "bottom.txt", 7)
        result = scan(tmp_path, settings).result
        assert result.total_size == 7
        assert result.dir_count == 200


class TestFinalizeDuplicates:
    def test_formula(self):
        candidates = {
            (1000, "a.txt"): ["/x/a.txt", "/y/a.txt", "/z/a.txt"],
            (5, "b.txt"): ["/x/b.txt"],
        }
        groups, count, size = finalize_duplicates(candidates)
        assert groups == [["/x/a.txt", "/y/a.txt", "/z/a.txt"]]
        assert count == 3
        assert size == 2000

    def test_ties_keep_first_seen_order(self):
        candidates = {
            (10, "first"): ["/1/first", "/2/first"],
            (10, "second"): ["/1/second", "/2/second"],
        }
        groups, _, _ = finalize_duplicates(candidates)
        assert groups[0] == ["/1/first", "/2/first"]


class TestScanTree:
    @pytest.mark.asyncio
    async def test_runs_without_blocking(self, tree, settings):
        scan_result = await scan_tree(str(tree), settings, now=NOW)
        assert scan_result.result.file_count == 8
        assert scan_result.result.scan_id

    @pytest.mark.asyncio
    async def test_each_scan_gets_new_id(self, tree):
        first = await scan_tree(str(tree))
        second = await scan_tree(str(tree))
        assert first.result.scan_id != second.result.scan_id

    @pytest.mark.asyncio
    async def test_default_now_marks_fresh_files_recent(self, tmp_path):
        write(tmp_path / "new.txt", 3, mtime=time.time())
        scan_result = await scan_tree(str(tmp_path))
        assert [f.name for f in scan_result.result.recent_files] == ["new.txt"]
