"""Tests for path resolution and the per-platform shortcut/drive strategies."""

from __future__ import annotations

import os
import subprocess
from collections import namedtuple
from typing import Any

import pytest

from handlers import handle_paths
from handlers.errors import PathError
from handlers.handle_paths import PosixPlatform, WindowsPlatform

INITIAL = os.path.abspath("initial-dir")


class TestResolve:
    """resolve() is syntactic and never sandboxed."""

    @pytest.mark.parametrize("raw", [None, "", "."])
    def test_empty_maps_to_initial_dir(self, raw: Any) -> None:
        assert handle_paths.resolve(raw, INITIAL) == INITIAL

    def test_relative_becomes_absolute(self) -> None:
        assert handle_paths.resolve("some/file.txt", INITIAL) == os.path.abspath("some/file.txt")

    def test_dotdot_is_collapsed_not_rejected(self) -> None:
        raw = os.path.join(os.sep, "tmp", "..", "etc")
        assert handle_paths.resolve(raw, INITIAL) == os.path.abspath(raw)

    def test_missing_path_is_fine(self) -> None:
        raw = os.path.abspath("definitely/not/here")
        assert handle_paths.resolve(raw, INITIAL) == raw

    def test_nul_byte_is_path_error(self) -> None:
        with pytest.raises(PathError):
            handle_paths.resolve("bad\x00name", INITIAL)

    def test_require_path_rejects_empty(self) -> None:
        with pytest.raises(PathError):
            handle_paths.require_path("", INITIAL)


class TestPlatformSelection:
    def test_windows_identity(self) -> None:
        assert isinstance(handle_paths.platform_for("win32"), WindowsPlatform)

    def test_unknown_platform_gets_noop_strategy(self) -> None:
        plat = handle_paths.platform_for("plan9")
        assert type(plat) is PosixPlatform
        assert plat.shortcut_extension is None


class TestPosixShortcuts:
    def test_resolution_is_identity(self) -> None:
        plat = PosixPlatform()
        assert plat.read_shortcut("/x/y.lnk") is None
        assert handle_paths.resolve_link("/x/y.lnk", plat) == "/x/y.lnk"

    def test_single_root_drive(self) -> None:
        assert PosixPlatform().drives() == ["/"]


class TestWindowsShortcuts:
    """PowerShell is never really invoked; subprocess.run is patched."""

    def test_target_is_read_from_stdout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def fake_run(cmd: Any, **kwargs: Any) -> subprocess.CompletedProcess:
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="C:\\Target\\Dir\r\n", stderr="")

        monkeypatch.setattr(handle_paths.subprocess, "run", fake_run)
        target = WindowsPlatform().read_shortcut("C:/Users/me/it's.lnk")
        assert target == "C:\\Target\\Dir"
        script = calls[0][-1]
        assert "C:\\Users\\me\\it''s.lnk" in script

    def test_failure_degrades_to_identity(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(cmd: Any, **kwargs: Any) -> None:
            raise OSError("powershell missing")

        monkeypatch.setattr(handle_paths.subprocess, "run", boom)
        plat = WindowsPlatform()
        assert plat.read_shortcut("C:\\a.lnk") is None
        assert handle_paths.resolve_link("C:\\a.lnk", plat) == "C:\\a.lnk"

    def test_undecodable_output_degrades_to_identity(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def bad_bytes(cmd: Any, **kwargs: Any) -> None:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        monkeypatch.setattr(handle_paths.subprocess, "run", bad_bytes)
        plat = WindowsPlatform()
        assert plat.read_shortcut("C:\\a.lnk") is None
        assert handle_paths.resolve_link("C:\\a.lnk", plat) == "C:\\a.lnk"

    def test_output_is_decoded_leniently(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen = {}

        def fake_run(cmd: Any, **kwargs: Any) -> subprocess.CompletedProcess:
            seen.update(kwargs)
            return subprocess.CompletedProcess(cmd, 0, stdout="C:\\T\n", stderr="")

        monkeypatch.setattr(handle_paths.subprocess, "run", fake_run)
        WindowsPlatform().read_shortcut("C:\\a.lnk")
        assert seen["encoding"] == "utf-8"
        assert seen["errors"] == "replace"

    def test_empty_output_degrades_to_identity(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            handle_paths.subprocess, "run",
            lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="\r\n", stderr=""),
        )
        assert WindowsPlatform().resolve_shortcut("C:\\a.lnk") == "C:\\a.lnk"

    def test_drives_from_partitions(self, monkeypatch: pytest.MonkeyPatch) -> None:
        Part = namedtuple("Part", "device mountpoint fstype opts")
        parts = [Part("C:", "C:\\", "NTFS", "rw"), Part("D:", "D:\\", "NTFS", "rw")]
        monkeypatch.setattr(handle_paths.psutil, "disk_partitions", lambda all=False: parts)
        assert WindowsPlatform().drives() == ["C:\\", "D:\\"]

    def test_drives_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(handle_paths.psutil, "disk_partitions", lambda all=False: [])
        assert WindowsPlatform().drives() == ["C:\\"]


class TestUserPaths:
    def test_known_keys_and_read_only(self) -> None:
        paths = handle_paths.user_paths(PosixPlatform())
        assert set(paths) == {"os_root", "homedir", "desktop", "documents", "downloads"}
        assert paths["os_root"] == "/"
        with pytest.raises(TypeError):
            paths["homedir"] = "/elsewhere"  # type: ignore[index]
