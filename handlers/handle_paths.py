#!/usr/bin/env python3
"""
handle_paths: path resolution, shortcut (.lnk) targets, drives and user folders.

There is deliberately no containment check here: every path the process can
reach is addressable. resolve() is the single seam where an allow-list would go.
"""
from __future__ import annotations
import logging
import os
import subprocess
import sys
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Optional

import psutil

from handlers.errors import PathError

log = logging.getLogger("webdesk.paths")


# ----------------------
# Platform strategies
# ----------------------
class PosixPlatform:
    """No shortcut files; a single volume rooted at '/'."""
    name = "posix"
    os_root = "/"
    shortcut_extension: Optional[str] = None

    def read_shortcut(self, path: str) -> Optional[str]:
        return None

    def resolve_shortcut(self, path: str) -> str:
        return self.read_shortcut(path) or path

    def drives(self) -> List[str]:
        return [self.os_root]


class WindowsPlatform(PosixPlatform):
    name = "windows"
    os_root = "C:\\"
    shortcut_extension = ".lnk"

    def read_shortcut(self, path: str) -> Optional[str]:
        # single quotes are doubled inside a PowerShell literal string
        literal = path.replace("/", "\\").replace("'", "''")
        script = ("$sh = New-Object -ComObject WScript.Shell; "
                  f"$sh.CreateShortcut('{literal}').TargetPath")
        try:
            proc = subprocess.run(["powershell", "-NoProfile", "-Command", script],
                                  capture_output=True, encoding="utf-8", errors="replace", check=True)
        except (OSError, ValueError, subprocess.CalledProcessError) as e:
            log.warning("LNK resolution failed for %s: %s", path, e)
            return None
        target = proc.stdout.strip()
        log.debug("LNK resolve: %s -> %s", path, target)
        return target or None

    def drives(self) -> List[str]:
        try:
            roots = [p.mountpoint for p in psutil.disk_partitions(all=False)]
        except OSError:
            log.exception("drive enumeration failed")
            roots = []
        return roots or [self.os_root]


PLATFORMS: Dict[str, type] = {
    "win32": WindowsPlatform,
}


def platform_for(identity: Optional[str] = None) -> PosixPlatform:
    """Pick the strategy for a sys.platform value; unknown platforms get the no-op one."""
    identity = identity or sys.platform
    return PLATFORMS.get(identity, PosixPlatform)()


# ----------------------
# Resolution
# ----------------------
def resolve(raw: Optional[str], initial_dir: str) -> str:
    """Empty, missing or '.' -> initial_dir; anything else -> absolute, normalized path.

    Purely syntactic: the path does not have to exist.
    """
    if raw is None or raw == "" or raw == ".":
        return initial_dir
    if "\x00" in raw:
        raise PathError("Invalid path")
    return os.path.abspath(raw)


def require_path(raw: Optional[str], initial_dir: str) -> str:
    if not raw:
        raise PathError("Path is required")
    return resolve(raw, initial_dir)


def resolve_link(path: str, platform: PosixPlatform) -> str:
    """Shortcut target, or the path itself when it cannot be resolved."""
    return platform.resolve_shortcut(path)


def user_paths(platform: PosixPlatform) -> MappingProxyType:
    home = Path.home()
    return MappingProxyType({
        "os_root": platform.os_root,
        "homedir": str(home),
        "desktop": str(home / "Desktop"),
        "documents": str(home / "Documents"),
        "downloads": str(home / "Downloads"),
    })
