"""Tests for installed application enumeration."""

from unittest.mock import patch

import pytest

from dirlens.models import InstalledApp
from dirlens.platform_apps import (
    enumerate_installed_applications,
    get_bundle_size,
    list_desktop_entries,
    parse_desktop_file,
)


def write_desktop(directory, filename, body):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(body)
    return path


EDITOR = """[Desktop Entry]
Type=Application
Name=Editor
Version=1.5
Exec=/usr/bin/editor %F
"""


class TestParseDesktopFile:
    def test_application(self, tmp_path):
        app = parse_desktop_file(write_desktop(tmp_path, "editor.desktop", EDITOR))
        assert app.name == "Editor"
        assert app.version == "1.5"
        assert app.install_location == "/usr/bin/editor %F"
        assert app.source == "desktop"

    @pytest.mark.parametrize(
        "body",
        [
            "[Desktop Entry]\nType=Link\nName=Docs\n",
            "[Desktop Entry]\nName=Hidden\nNoDisplay=true\n",
            "[Desktop Entry]\nName=Gone\nHidden=True\n",
            "[Desktop Entry]\nType=Application\n",
            "[Other]\nName=Nope\n",
        ],
    )
    def test_skipped_entries(self, tmp_path, body):
        assert parse_desktop_file(write_desktop(tmp_path, "x.desktop", body)) is None

    def test_percent_signs_are_literal(self, tmp_path):
        body = "[Desktop Entry]\nName=100% Tool\nExec=tool %U\n"
        app = parse_desktop_file(write_desktop(tmp_path, "tool.desktop", body))
        assert app.name == "100% Tool"

    def test_garbage_file(self, tmp_path):
        path = write_desktop(tmp_path, "bad.desktop", "not an ini file at all")
        assert parse_desktop_file(path) is None


class TestListDesktopEntries:
    def test_user_entries_shadow_system_entries(self, tmp_path, monkeypatch):
        user = tmp_path / "user"
        system = tmp_path / "system"
        write_desktop(user, "editor.desktop", EDITOR.replace("1.5", "2.0"))
        write_desktop(system, "editor.desktop", EDITOR)
        write_desktop(system, "viewer.desktop", "[Desktop Entry]\nName=Viewer\n")
        monkeypatch.setenv("XDG_DATA_DIRS", "")

        with patch("dirlens.platform_apps.DESKTOP_DIRS", [str(user), str(system)]):
            apps = list_desktop_entries()

        assert [(a.name, a.version) for a in apps] == [("Editor", "2.0"), ("Viewer", "Unknown")]

    def test_xdg_data_dirs(self, tmp_path, monkeypatch):
        write_desktop(tmp_path / "share" / "applications", "a.desktop", "[Desktop Entry]\nName=A\n")
        monkeypatch.setenv("XDG_DATA_DIRS", str(tmp_path / "share"))

        with patch("dirlens.platform_apps.DESKTOP_DIRS", []):
            apps = list_desktop_entries()

        assert [a.name for a in apps] == ["A"]


class TestEnumerate:
    def test_unsupported_platform(self):
        with patch("dirlens.platform_apps.platform.system", return_value="Windows"):
            assert enumerate_installed_applications() == []

    def test_linux_sorted_case_insensitive(self):
        found = [InstalledApp(name="zsh"), InstalledApp(name="Alacritty"), InstalledApp(name="btop")]
        with patch("dirlens.platform_apps.platform.system", return_value="Linux"), patch(
            "dirlens.platform_apps.list_desktop_entries", return_value=found
        ):
            apps = enumerate_installed_applications()
        assert [a.name for a in apps] == ["Alacritty", "btop", "zsh"]

    def test_macos_uses_bundles(self):
        with patch("dirlens.platform_apps.platform.system", return_value="Darwin"), patch(
            "dirlens.platform_apps.list_mac_bundles", return_value=[InstalledApp(name="Safari")]
        ):
            assert [a.name for a in enumerate_installed_applications()] == ["Safari"]


def test_bundle_size(tmp_path):
    bundle = tmp_path / "Thing.app"
    (bundle / "Contents" / "MacOS").mkdir(parents=True)
    (bundle / "Contents" / "Info.plist").write_bytes(b"x" * 10)
    (bundle / "Contents" / "MacOS" / "thing").write_bytes(b"x" * 90)
    (bundle / "Contents" / "link").symlink_to(bundle / "Contents" / "MacOS" / "thing")

    assert get_bundle_size(bundle) == 100
