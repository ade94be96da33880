#!/usr/bin/env python3
"""
handle_assets: precompiled UI assets held in memory, with SPA fallback to index.html.
"""
from __future__ import annotations
import logging
import mimetypes
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Optional

log = logging.getLogger("webdesk.assets")

INDEX_KEY = "/index.html"
API_PREFIX = "/api/"


@dataclass(frozen=True)
class Asset:
    content: bytes
    mime: str


class AssetCatalog:
    def __init__(self, assets: Optional[Dict[str, Asset]] = None):
        self._assets = MappingProxyType(dict(assets or {}))

    def __len__(self):
        return len(self._assets)

    def __contains__(self, key):
        return key in self._assets

    @classmethod
    def load(cls, directory: Optional[str]) -> "AssetCatalog":
        """Read every file under directory once; keys are '/'-rooted URL paths."""
        assets: Dict[str, Asset] = {}
        if not directory or not os.path.isdir(directory):
            log.warning("No asset directory at %s; serving API only", directory)
            return cls(assets)
        for dirpath, _dirs, files in os.walk(directory):
            for fn in files:
                full = os.path.join(dirpath, fn)
                rel = os.path.relpath(full, directory).replace(os.sep, "/")
                mime = mimetypes.guess_type(fn)[0] or "application/octet-stream"
                with open(full, "rb") as f:
                    assets["/" + rel] = Asset(f.read(), mime)
        log.info("Loaded %d assets from %s", len(assets), directory)
        return cls(assets)

    def serve(self, request_path: str) -> Optional[Asset]:
        """Asset for the path, the index document for unknown paths, None under /api/."""
        if request_path.startswith(API_PREFIX):
            return None
        key = INDEX_KEY if request_path in ("", "/") else request_path
        return self._assets.get(key) or self._assets.get(INDEX_KEY)
