"""Exceptions raised by dirlens."""


class DirlensError(Exception):
    """Base class for dirlens errors."""


class DirectoryReadError(DirlensError):
    """The requested directory itself could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class DirectoryNotFoundError(DirectoryReadError):
    """The requested directory does not exist."""


class DirectoryPermissionError(DirectoryReadError):
    """Access to the requested directory was denied."""


class UnknownScanError(DirlensError, KeyError):
    """No duplicate groups are retained for the given scan id."""

    def __init__(self, scan_id: str):
        super().__init__(scan_id)
        self.scan_id = scan_id

    def __str__(self) -> str:
        return f"Unknown scan id: {self.scan_id}"


def wrap_os_error(path: str, error: OSError) -> DirectoryReadError:
    """Translate an OSError on a root path into a dirlens error."""
    reason = error.strerror or str(error)
    if isinstance(error, FileNotFoundError):
        return DirectoryNotFoundError(path, reason)
    if isinstance(error, PermissionError):
        return DirectoryPermissionError(path, reason)
    return DirectoryReadError(path, reason)
