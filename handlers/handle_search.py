#!/usr/bin/env python3
"""
handle_search: prefix query grammar over one directory and the app catalog.

  file:<term>    non-directories whose name contains term
  folder:<term>  directories whose name contains term
  app:<term>     catalog apps whose display name contains term
  .<ext>         entries with exactly that extension
  <term>         apps, then entries, by name

Prefixes are case-sensitive, terms are not. No recursion.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from app_registry import AppDescriptor
from handlers.handle_listing import scan_entries

PREFIXES = (("file:", "file"), ("folder:", "folder"), ("app:", "app"))


@dataclass(frozen=True)
class SearchQuery:
    kind: str   # file | folder | app | ext | all
    term: str

    @property
    def scans_apps(self) -> bool:
        return self.kind in ("all", "app")

    @property
    def scans_directory(self) -> bool:
        return self.kind != "app"


def parse_query(raw: str) -> SearchQuery:
    for prefix, kind in PREFIXES:
        if raw.startswith(prefix):
            return SearchQuery(kind, raw[len(prefix):].strip().lower())
    if raw.startswith(".") and ":" not in raw:
        return SearchQuery("ext", raw.lower())
    return SearchQuery("all", raw.lower())


def _entry_matches(q: SearchQuery, name: str, is_dir: bool) -> bool:
    if q.kind == "ext":
        return os.path.splitext(name)[1].lower() == q.term
    if q.term not in name.lower():
        return False
    if q.kind == "file":
        return not is_dir
    if q.kind == "folder":
        return is_dir
    return True


def search(raw: str, directory: str, catalog: Mapping[str, AppDescriptor]) -> List[Dict[str, Any]]:
    q = parse_query(raw or "")
    results: List[Dict[str, Any]] = []
    if q.scans_apps:
        for app in catalog.values():
            if q.term in app.name.lower():
                results.append({"type": "app", **app.to_dict()})
    if q.scans_directory:
        for entry in scan_entries(directory):
            is_dir = entry.is_dir()
            if _entry_matches(q, entry.name, is_dir):
                results.append({
                    "type": "file" if q.kind == "ext" or not is_dir else "folder",
                    "name": entry.name,
                    "path": os.path.join(directory, entry.name),
                })
    return results
