#!/usr/bin/env python3
"""
handle_settings: one JSON document per app id under the registry directory.
Writes replace the whole document; a missing file means "no settings yet".
"""
import json
import logging
import os
import re
import tempfile

from handlers.errors import BadRequest, IOFault, PathError

log = logging.getLogger("webdesk.settings")

APP_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
SETTINGS_EXT = "json"


class SettingsStore:
    def __init__(self, root):
        self.root = os.path.abspath(root)

    def path_for(self, app_id):
        if not app_id or not APP_ID_RE.match(app_id) or app_id in (".", ".."):
            raise PathError("Invalid app id")
        return os.path.join(self.root, f"{app_id}.{SETTINGS_EXT}")

    def get(self, app_id):
        p = self.path_for(app_id)
        try:
            with open(p, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError as e:
            raise IOFault(f"corrupt settings for {app_id}: {e}")
        except OSError as e:
            raise IOFault(f"settings read error: {e.strerror or e}")

    def set(self, app_id, document):
        if not isinstance(document, dict):
            raise BadRequest("Settings document must be a JSON object")
        p = self.path_for(app_id)
        try:
            os.makedirs(self.root, exist_ok=True)
            # atomic replace: temp file in the same dir, then os.replace
            fd, tmpname = tempfile.mkstemp(dir=self.root, prefix=f".{app_id}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, ensure_ascii=False)
                os.replace(tmpname, p)
            finally:
                if os.path.exists(tmpname):
                    os.remove(tmpname)
        except OSError as e:
            raise IOFault(f"settings write error: {e.strerror or e}")
        log.info("Saved settings for %s", app_id)
        return True
