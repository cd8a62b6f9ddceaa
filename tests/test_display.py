"""Tests for display module."""

from unittest.mock import patch

from rich.console import Console

from dirlens.display import (
    format_time,
    show_apps,
    show_duplicate_page,
    show_listing,
    show_scan,
    show_search,
)
from dirlens.models import (
    Bucket,
    CategoryBucket,
    DirectoryEntry,
    DuplicatePage,
    FileRef,
    InstalledApp,
    ScanResult,
)


def render(func, *args) -> str:
    test_console = Console(record=True, width=200)
    with patch("dirlens.display.console", test_console):
        func(*args)
    return test_console.export_text()


class TestFormatTime:
    def test_zero_is_dash(self):
        assert format_time(0) == "-"

    def test_formats_date(self):
        assert format_time(1_700_000_000).startswith("2023-11-1")


class TestShowListing:
    def test_directories_first(self):
        entries = [
            DirectoryEntry(name="b.txt", path="/x/b.txt", size=2000),
            DirectoryEntry(name="src", path="/x/src", is_directory=True),
        ]
        output = render(show_listing, "/x", entries)
        assert output.index("src/") < output.index("b.txt")
        assert "2.0 KB" in output

    def test_unreadable_entry(self):
        entries = [DirectoryEntry(name="locked", path="/x/locked", read_error=True)]
        assert "(unreadable)" in render(show_listing, "/x", entries)

    def test_empty(self):
        assert "Empty directory" in render(show_listing, "/x", [])


class TestShowScan:
    def test_summary(self):
        result = ScanResult(
            scan_id="abc123",
            root="/data",
            total_size=3000,
            file_count=3,
            dir_count=1,
            skipped_dirs=2,
            categories={Bucket.DOCS: CategoryBucket(size=3000, count=3)},
            large_files=[FileRef(name="big.iso", path="/data/big.iso", size=3000)],
            duplicate_group_count=1,
            duplicate_count=2,
            duplicate_size=1000,
        )
        output = render(show_scan, result)
        assert "docs" in output
        assert "100%" in output
        assert "/data/big.iso" in output
        assert "1.0 KB reclaimable" in output
        assert "Skipped 2 unreadable folders" in output
        assert "Scan id: abc123" in output


class TestShowDuplicatePage:
    def test_numbers_groups_across_pages(self):
        page = DuplicatePage(groups=[["/a/x", "/b/x"]], total=3, page=1, page_size=1)
        output = render(show_duplicate_page, page)
        assert "Group 2" in output
        assert "Groups 2-2 of 3" in output

    def test_empty_page(self):
        output = render(show_duplicate_page, DuplicatePage(total=3, page=5, page_size=1))
        assert "No duplicate groups on page 5" in output


def test_show_search_no_matches():
    assert "Nothing matches 'q'" in render(show_search, "q", [])


def test_show_apps():
    apps = [InstalledApp(name="Editor", version="1.2", size=5_000_000)]
    output = render(show_apps, apps)
    assert "Editor" in output
    assert "5.0 MB" in output
    assert "1 applications" in output
