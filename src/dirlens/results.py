"""Retained duplicate groups, served page by page."""

import logging
from typing import Optional

from dirlens.errors import UnknownScanError
from dirlens.models import DuplicatePage

LOGGER = logging.getLogger(__name__)

RETAINED_SCANS = 8


class DuplicateStore:
    """
    Full duplicate group lists of recent scans.

    The most recent scan is always available as the "latest" slot, so
    callers that do not track a scan id page through whatever was scanned
    last. Callers that pass the scan id returned with a ScanResult keep
    paging that scan even after another root has been scanned, for as
    long as it is among the ``retained`` most recent sessions.
    """

    def __init__(self, retained: int = RETAINED_SCANS):
        self.retained = retained
        self._sessions: dict[str, list[list[str]]] = {}
        self._latest_id: Optional[str] = None
        self._latest: list[list[str]] = []

    @property
    def latest_id(self) -> Optional[str]:
        return self._latest_id

    def set_last(self, groups: list[list[str]], scan_id: Optional[str] = None) -> Optional[str]:
        """Replace the latest slot, retaining groups under scan_id too."""
        self._latest = groups
        self._latest_id = scan_id
        if scan_id is not None:
            self._sessions.pop(scan_id, None)
            self._sessions[scan_id] = groups
            while len(self._sessions) > self.retained:
                dropped = next(iter(self._sessions))
                del self._sessions[dropped]
                LOGGER.debug("Dropped duplicate groups of scan %s", dropped)
        return scan_id

    def groups(self, scan_id: Optional[str] = None) -> list[list[str]]:
        """Full group list of a scan (latest when scan_id is None)."""
        if scan_id is None:
            return self._latest
        try:
            return self._sessions[scan_id]
        except KeyError:
            raise UnknownScanError(scan_id) from None

    def page(
        self,
        page_index: int,
        page_size: int,
        scan_id: Optional[str] = None,
    ) -> DuplicatePage:
        """
        Get one page of duplicate groups.

        Args:
            page_index: Zero-based page number
            page_size: Groups per page
            scan_id: Scan to read (default: latest)

        Returns:
            DuplicatePage; ``groups`` is empty past the last page

        Raises:
            ValueError: Negative page index or non-positive page size
            UnknownScanError: scan_id is not retained
        """
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")

        groups = self.groups(scan_id)
        start = page_index * page_size
        return DuplicatePage(
            groups=[list(group) for group in groups[start : start + page_size]],
            total=len(groups),
            page=page_index,
            page_size=page_size,
            scan_id=scan_id if scan_id is not None else self._latest_id,
        )
