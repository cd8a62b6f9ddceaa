"""File category definitions for dirlens."""

from dirlens.models import Bucket, CategoryBucket

# Evaluated in order, first match wins. OTHERS is the fallback and has no entry.
BUCKET_EXTENSIONS: tuple[tuple[Bucket, frozenset[str]], ...] = (
    (Bucket.IMAGES, frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"})),
    (Bucket.VIDEOS, frozenset({"mp4", "mkv", "avi", "mov", "wmv", "flv", "webm"})),
    (Bucket.AUDIO, frozenset({"mp3", "wav", "flac", "aac", "ogg", "m4a"})),
    (
        Bucket.DOCS,
        frozenset({"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "md"}),
    ),
    (Bucket.APPS, frozenset({"exe", "msi", "appx", "dmg"})),
)

REDUNDANT_EXTENSIONS = frozenset({"tmp", "log", "cache"})


def extension_of(name: str) -> str:
    """Lower-cased extension without the dot ('' when there is none)."""
    _, dot, ext = name.rpartition(".")
    if not dot or not _:
        # No dot, or a dotfile such as '.bashrc'
        return ""
    return ext.lower()


def categorize(ext: str) -> Bucket:
    """Get the bucket for a lower-cased extension."""
    for bucket, extensions in BUCKET_EXTENSIONS:
        if ext in extensions:
            return bucket
    return Bucket.OTHERS


def is_redundant(ext: str, size: int) -> bool:
    """Whether a file is a cleanup candidate (temp/log/cache or empty)."""
    return ext in REDUNDANT_EXTENSIONS or size == 0


def empty_buckets() -> dict[Bucket, CategoryBucket]:
    """Fresh zeroed buckets in display order."""
    buckets = {
        bucket: CategoryBucket(extensions=sorted(extensions))
        for bucket, extensions in BUCKET_EXTENSIONS
    }
    buckets[Bucket.OTHERS] = CategoryBucket()
    return buckets
