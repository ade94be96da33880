#!/usr/bin/env python3
"""
Application catalog served at /api/apps.

Loaded once at startup (built-in table or a JSON file with the same shape) and
frozen: descriptors are immutable dataclasses inside a read-only mapping.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

WILDCARD = "*"


@dataclass(frozen=True)
class AppDescriptor:
    id: str
    name: str
    icon: str
    showInContext: bool = False
    pinned: bool = False
    supportedExtensions: Optional[Tuple[str, ...]] = None

    def handles(self, ext: str) -> bool:
        if not self.supportedExtensions:
            return False
        return ext.lower() in self.supportedExtensions or WILDCARD in self.supportedExtensions

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "showInContext": self.showInContext,
            "pinned": self.pinned,
        }
        if self.supportedExtensions is not None:
            d["supportedExtensions"] = list(self.supportedExtensions)
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AppDescriptor":
        exts = d.get("supportedExtensions")
        return AppDescriptor(
            id=d["id"],
            name=d["name"],
            icon=d.get("icon", ""),
            showInContext=bool(d.get("showInContext", False)),
            pinned=bool(d.get("pinned", False)),
            supportedExtensions=tuple(exts) if exts is not None else None,
        )


BUILTIN_APPS: List[Dict[str, Any]] = [
    {"id": "explorer", "name": "File Explorer", "icon": "📁", "pinned": True},
    {"id": "editor", "name": "Simple Editor", "icon": "📝", "showInContext": True,
     "supportedExtensions": [
         ".txt", ".md", ".ts", ".js", ".json", ".css", ".html", ".htm",
         ".py", ".c", ".cpp", ".h", ".hpp", ".rs", ".go", ".sh", ".bat",
         ".torrent", ".yaml", ".yml", ".ini", ".conf", "",
     ]},
    {"id": "hex", "name": "Hex Editor", "icon": "🔢", "showInContext": True,
     "supportedExtensions": [WILDCARD]},
    {"id": "image", "name": "Image Viewer", "icon": "🖼️", "showInContext": True,
     "supportedExtensions": [".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp"]},
    {"id": "video", "name": "Video Player", "icon": "🎬", "showInContext": True,
     "supportedExtensions": [".mp4", ".webm", ".ogg"]},
    {"id": "calc", "name": "Calculator", "icon": "🧮", "pinned": True},
    {"id": "paint", "name": "Paint App", "icon": "🎨", "pinned": True},
    {"id": "image-editor", "name": "Image Editor", "icon": "🖌️"},
    {"id": "browser", "name": "Browser", "icon": "🌐", "showInContext": True, "pinned": True},
    {"id": "taskmanager", "name": "Task Manager", "icon": "📊", "pinned": True},
    {"id": "sysinfo", "name": "System Info", "icon": "ℹ️"},
    {"id": "terminal", "name": "Terminal", "icon": "💻", "pinned": True},
    {"id": "settings", "name": "Settings", "icon": "⚙️", "pinned": True},
    {"id": "stickynotes", "name": "Sticky Notes", "icon": "📝"},
    {"id": "minesweeper", "name": "Minesweeper", "icon": "💣"},
]


def load_catalog(path: Optional[str] = None) -> Mapping[str, AppDescriptor]:
    """Built-in catalog, or a JSON file holding a list (or id-keyed map) of descriptors."""
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        items = list(raw.values()) if isinstance(raw, dict) else raw
    else:
        items = BUILTIN_APPS
    apps = [AppDescriptor.from_dict(d) for d in items]
    return MappingProxyType({a.id: a for a in apps})


def catalog_to_json(catalog: Mapping[str, AppDescriptor]) -> Dict[str, Dict[str, Any]]:
    return {app_id: app.to_dict() for app_id, app in catalog.items()}


def apps_for_extension(catalog: Mapping[str, AppDescriptor], ext: str) -> List[AppDescriptor]:
    """Context-menu candidates for a file extension ('*' matches anything)."""
    return [a for a in catalog.values() if a.showInContext and a.handles(ext)]
