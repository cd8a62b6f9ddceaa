"""Enumeration of installed applications.

This is the slow, uncached primitive behind the installed applications
cache. macOS bundles and freedesktop ``.desktop`` entries are supported;
other platforms report nothing.
"""

import configparser
import logging
import os
import platform
import plistlib
import time
from pathlib import Path

from dirlens.config import expand_path
from dirlens.models import InstalledApp

LOGGER = logging.getLogger(__name__)

MAC_APP_DIRS = ["/Applications", "~/Applications"]

# User entries first so they shadow system entries with the same id
DESKTOP_DIRS = [
    "~/.local/share/applications",
    "/usr/local/share/applications",
    "/usr/share/applications",
    "/var/lib/flatpak/exports/share/applications",
]


def get_bundle_size(path: Path) -> int:
    """Total size of regular files under path (symlinks not followed)."""
    total = 0
    stack = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(Path(entry.path))
                    except OSError:
                        continue
        except OSError:
            continue
    return total


def _read_info_plist(bundle: Path) -> dict:
    try:
        with open(bundle / "Contents" / "Info.plist", "rb") as f:
            return plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError):
        return {}


def list_mac_bundles() -> list[InstalledApp]:
    """Applications in /Applications and ~/Applications."""
    apps = []
    for app_dir in MAC_APP_DIRS:
        root = expand_path(app_dir)
        if not root.is_dir():
            continue
        try:
            bundles = [p for p in root.iterdir() if p.suffix == ".app" and p.is_dir()]
        except OSError:
            continue

        for bundle in bundles:
            info = _read_info_plist(bundle)
            try:
                modified = bundle.stat().st_mtime
            except OSError:
                continue
            apps.append(
                InstalledApp(
                    name=info.get("CFBundleName") or bundle.stem,
                    version=str(info.get("CFBundleShortVersionString") or "Unknown"),
                    publisher=str(info.get("CFBundleIdentifier") or "Unknown"),
                    install_location=str(bundle),
                    size=get_bundle_size(bundle),
                    install_date=time.strftime("%Y-%m-%d", time.localtime(modified)),
                    source="bundle",
                )
            )
    return apps


def _desktop_dirs() -> list[Path]:
    dirs = [expand_path(d) for d in DESKTOP_DIRS]
    for data_dir in os.environ.get("XDG_DATA_DIRS", "").split(os.pathsep):
        if data_dir:
            candidate = Path(data_dir) / "applications"
            if candidate not in dirs:
                dirs.append(candidate)
    return dirs


def parse_desktop_file(path: Path) -> InstalledApp | None:
    """Parse a .desktop file; None for hidden or non-application entries."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # Keys are case-sensitive
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError) as e:
        LOGGER.debug("Skipping %s: %s", path, e)
        return None

    if not parser.has_section("Desktop Entry"):
        return None
    entry = parser["Desktop Entry"]
    if entry.get("Type", "Application") != "Application":
        return None
    if entry.get("NoDisplay", "false").lower() == "true" or entry.get("Hidden", "false").lower() == "true":
        return None
    name = entry.get("Name")
    if not name:
        return None

    return InstalledApp(
        name=name,
        version=entry.get("X-AppImage-Version") or entry.get("Version") or "Unknown",
        publisher=entry.get("X-Publisher", "Unknown"),
        install_location=entry.get("Path") or entry.get("TryExec") or entry.get("Exec"),
        source="desktop",
    )


def list_desktop_entries() -> list[InstalledApp]:
    """Applications declared by freedesktop .desktop files."""
    apps = []
    seen: set[str] = set()
    for directory in _desktop_dirs():
        if not directory.is_dir():
            continue
        try:
            files = sorted(directory.glob("*.desktop"))
        except OSError:
            continue
        for desktop_file in files:
            if desktop_file.name in seen:
                continue
            seen.add(desktop_file.name)
            app = parse_desktop_file(desktop_file)
            if app is not None:
                apps.append(app)
    return apps


def enumerate_installed_applications() -> list[InstalledApp]:
    """
    List installed applications for the current platform.

    Slow: bundle sizes are computed by walking each bundle.

    Returns:
        Applications sorted by name (case-insensitive)
    """
    system = platform.system()
    if system == "Darwin":
        apps = list_mac_bundles()
    elif system == "Linux":
        apps = list_desktop_entries()
    else:
        LOGGER.debug("No application enumeration for %s", system)
        apps = []

    apps.sort(key=lambda a: a.name.lower())
    return apps
