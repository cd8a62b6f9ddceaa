"""Data models for dirlens."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Bucket(str, Enum):
    """File category bucket for the analyzer breakdown."""

    IMAGES = "images"
    VIDEOS = "videos"
    AUDIO = "audio"
    DOCS = "docs"
    APPS = "apps"
    OTHERS = "others"  # Catch-all, never matched by extension


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


class DirectoryEntry(BaseModel):
    """One entry of a directory listing."""

    name: str = Field(..., description="Entry basename")
    path: str = Field(..., description="Absolute path")
    is_directory: bool = Field(False, description="Whether the entry is a directory")
    size: int = Field(0, description="Size in bytes (0 when stat failed)")
    modified_at: float = Field(0.0, description="Modification time, epoch seconds")
    created_at: float = Field(0.0, description="Creation time, epoch seconds")
    read_error: bool = Field(False, description="Whether stat failed for this entry")


class CategoryBucket(BaseModel):
    """Running totals for one category bucket."""

    size: int = Field(0, description="Cumulative bytes")
    count: int = Field(0, description="Number of files")
    extensions: list[str] = Field(default_factory=list, description="Extensions in this bucket")


class FileRef(BaseModel):
    """A file reported in the large or recent lists."""

    name: str
    path: str
    size: int = 0
    modified_at: float = 0.0

    @property
    def size_human(self) -> str:
        """Human-readable size string."""
        return format_size(self.size)


class ScanResult(BaseModel):
    """Summary of one subtree scan."""

    scan_id: str = Field(..., description="Identifier of this scan session")
    root: str = Field(..., description="Root path that was scanned")
    total_size: int = Field(0, description="Total bytes of all readable files")
    file_count: int = Field(0, description="Number of files counted")
    dir_count: int = Field(0, description="Number of directories walked")
    skipped_dirs: int = Field(0, description="Subdirectories skipped on read errors")
    categories: dict[Bucket, CategoryBucket] = Field(default_factory=dict)
    large_files: list[FileRef] = Field(default_factory=list)
    recent_files: list[FileRef] = Field(default_factory=list)
    redundant_files: list[str] = Field(default_factory=list)
    redundant_count: int = 0
    redundant_size: int = 0
    duplicate_groups: list[list[str]] = Field(
        default_factory=list, description="Preview of the first duplicate groups"
    )
    duplicate_group_count: int = Field(0, description="Number of groups in the full list")
    duplicate_count: int = Field(0, description="Files across all duplicate groups")
    duplicate_size: int = Field(0, description="Reclaimable bytes if one copy were kept")

    @property
    def total_size_human(self) -> str:
        """Human-readable total size."""
        return format_size(self.total_size)


class DuplicatePage(BaseModel):
    """One page of duplicate groups from a retained scan."""

    groups: list[list[str]] = Field(default_factory=list)
    total: int = Field(0, description="Number of groups in the full list")
    page: int = 0
    page_size: int = 0
    scan_id: Optional[str] = None


class InstalledApp(BaseModel):
    """An installed application as reported by the platform."""

    name: str
    version: str = "Unknown"
    publisher: str = "Unknown"
    install_location: Optional[str] = None
    size: int = 0
    install_date: Optional[str] = None
    source: str = Field("unknown", description="Where the record was found")


class InstalledAppsSnapshot(BaseModel):
    """On-disk payload of the installed applications cache."""

    data: list[InstalledApp] = Field(default_factory=list)
    fetched_at: float = Field(0.0, description="Wall clock time of the fetch, epoch seconds")


class MutationResult(BaseModel):
    """Result of a filesystem mutation."""

    success: bool = True
    error: Optional[str] = Field(None, description="Error code or message if failed")
    failed: list[dict[str, str]] = Field(
        default_factory=list, description="Per-path failures for bulk operations"
    )
    details: Optional[str] = Field(None, description="Extra context, e.g. the conflicting name")
    affected_dirs: list[str] = Field(
        default_factory=list, description="Directories whose contents changed"
    )
