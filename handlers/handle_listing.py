#!/usr/bin/env python3
"""
handle_listing: enumerate one directory and stat every child in parallel.

A failing stat degrades that single entry to {name, isDirectory, error};
only a directory that cannot be enumerated at all fails the call.
"""
from __future__ import annotations
import concurrent.futures
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from handlers.errors import EntryStatFault, ListingFault
from handlers.handle_paths import PosixPlatform

log = logging.getLogger("webdesk.listing")

DEFAULT_WORKERS = 16


def iso_mtime(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def scan_entries(directory: str) -> List[os.DirEntry]:
    """os.scandir with errors translated to ListingFault."""
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except FileNotFoundError:
        raise ListingFault(f"No such directory: {directory}", 404)
    except NotADirectoryError:
        raise ListingFault(f"Not a directory: {directory}", 400)
    except PermissionError:
        raise ListingFault(f"Permission denied: {directory}", 403)
    except OSError as e:
        raise ListingFault(f"Cannot list {directory}: {e.strerror or e}", 403)
    return sorted(entries, key=lambda e: (not e.is_dir(), e.name.lower()))


def _stat_entry(entry: os.DirEntry, platform: PosixPlatform) -> Dict[str, Any]:
    try:
        st = os.stat(entry.path)
    except OSError as e:
        log.debug("stat failed for %s: %s", entry.path, e)
        raise EntryStatFault(entry.name, entry.is_dir())

    is_dir = entry.is_dir()
    extension = os.path.splitext(entry.name)[1].lower()
    lnk_target = None
    if platform.shortcut_extension and extension == platform.shortcut_extension:
        lnk_target = platform.read_shortcut(entry.path)
        if lnk_target and os.path.isdir(lnk_target):
            is_dir = True

    return {
        "name": entry.name,
        "isDirectory": is_dir,
        "isLnk": lnk_target is not None,
        "lnkTarget": lnk_target,
        "size": st.st_size,
        "mtime": iso_mtime(st.st_mtime),
        "extension": extension,
    }


def _entry_or_degraded(entry: os.DirEntry, platform: PosixPlatform) -> Dict[str, Any]:
    try:
        return _stat_entry(entry, platform)
    except EntryStatFault as fault:
        return fault.as_entry()


def list_directory(directory: str, platform: PosixPlatform,
                   workers: int = DEFAULT_WORKERS) -> Dict[str, Any]:
    entries = scan_entries(directory)
    if not entries:
        return {"currentPath": directory, "files": []}
    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, min(workers, len(entries)))) as ex:
        files = list(ex.map(lambda e: _entry_or_degraded(e, platform), entries))
    return {"currentPath": directory, "files": files}
