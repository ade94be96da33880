"""Shared fixtures: a gateway app rooted in a temporary directory."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from handlers.handle_paths import PosixPlatform
from webdesk_server import create_app


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """A directory holding ``a.png`` and ``b.txt``."""
    root = tmp_path / "work"
    root.mkdir()
    (root / "a.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "b.txt").write_text("hello", encoding="utf-8")
    return root


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text("<html>WebDesk</html>", encoding="utf-8")
    (dist / "assets" / "app.js").write_text("console.log(1)", encoding="utf-8")
    return dist


@pytest.fixture
def app(tmp_path: Path, workdir: Path, assets_dir: Path) -> Any:
    app = create_app({
        "INITIAL_DIR": str(workdir),
        "REGISTRY_DIR": str(tmp_path / "registry"),
        "ASSETS_DIR": str(assets_dir),
        "PLATFORM": PosixPlatform(),
    })
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app: Any) -> Any:
    return app.test_client()
