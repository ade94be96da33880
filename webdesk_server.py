#!/usr/bin/env python3
"""
WebDesk gateway server (Flask)
 - Exposes the host filesystem, a shell and OS telemetry to the WebDesk UI
 - Configurable via env: WEBDESK_HOST, WEBDESK_PORT, WEBDESK_INITIAL_DIR,
   WEBDESK_REGISTRY_DIR, WEBDESK_ASSETS_DIR, WEBDESK_APPS_FILE,
   WEBDESK_ALLOW_ORIGINS, WEBDESK_STAT_WORKERS, WEBDESK_TRUSTED_EXEC, WEBDESK_LOG
 - No auth and no root containment: paths address the whole volume tree
 - /api/terminal is trusted local execution (no sandbox, timeout or output cap);
   set WEBDESK_TRUSTED_EXEC=0 to switch it off
"""
import argparse
import logging
import os
import signal
import sys
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from flask import Flask, Response, current_app, jsonify, request, send_file
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import app_registry
from handlers import handle_content, handle_paths, handle_search, handle_stats, handle_terminal
from handlers.errors import BadRequest, GatewayError
from handlers.handle_assets import API_PREFIX, AssetCatalog
from handlers.handle_listing import list_directory
from handlers.handle_settings import SettingsStore

# ---------- configuration ----------
_PLATFORM = handle_paths.platform_for()
HOST = os.environ.get("WEBDESK_HOST", "127.0.0.1")
PORT = int(os.environ.get("WEBDESK_PORT", "3000"))
INITIAL_DIR = os.environ.get("WEBDESK_INITIAL_DIR") or _PLATFORM.os_root
REGISTRY_DIR = os.environ.get("WEBDESK_REGISTRY_DIR") or os.path.abspath("registry")
ASSETS_DIR = os.environ.get("WEBDESK_ASSETS_DIR") or os.path.abspath(os.path.join("frontend", "dist"))
APPS_FILE = os.environ.get("WEBDESK_APPS_FILE", "")
ALLOW_ORIGINS = os.environ.get("WEBDESK_ALLOW_ORIGINS", "*").split(",")
STAT_WORKERS = int(os.environ.get("WEBDESK_STAT_WORKERS", "16"))
TRUSTED_EXEC = os.environ.get("WEBDESK_TRUSTED_EXEC", "1") not in ("0", "false", "no")
LOG_FILE = os.environ.get("WEBDESK_LOG", "")

# ---------- logging ----------
logger = logging.getLogger("webdesk")
if not logger.handlers:
    logger.setLevel(logging.INFO)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(fmt)
    logger.addHandler(h)
    if LOG_FILE:
        fh = logging.FileHandler(LOG_FILE)
        fh.setFormatter(fmt)
        logger.addHandler(fh)


@dataclass
class Gateway:
    """Everything built once at startup; read concurrently by all requests."""
    platform: handle_paths.PosixPlatform
    catalog: Mapping[str, app_registry.AppDescriptor]
    user_paths: Mapping[str, str]
    settings: SettingsStore
    assets: AssetCatalog


def default_config() -> Dict[str, Any]:
    return {
        "INITIAL_DIR": INITIAL_DIR,
        "REGISTRY_DIR": REGISTRY_DIR,
        "ASSETS_DIR": ASSETS_DIR,
        "APPS_FILE": APPS_FILE,
        "ALLOW_ORIGINS": [o for o in ALLOW_ORIGINS if o],
        "STAT_WORKERS": STAT_WORKERS,
        "TRUSTED_EXEC": TRUSTED_EXEC,
        "PLATFORM": None,
    }


# ---------- helpers ----------
def json_ok(**kw):
    d = {"success": True}
    d.update(kw)
    return jsonify(d)


def json_err(msg, code=400, **extra):
    d = {"ok": False, "error": msg}
    d.update(extra)
    return jsonify(d), code


def gw() -> Gateway:
    return current_app.extensions["webdesk"]


def path_arg(name="path", required=False):
    raw = request.args.get(name)
    initial = current_app.config["INITIAL_DIR"]
    if required:
        return handle_paths.require_path(raw, initial)
    return handle_paths.resolve(raw, initial)


def json_body():
    data = request.get_json(force=True, silent=True)
    if data is None:
        raise BadRequest("Invalid JSON")
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


# ---------- endpoints ----------
def register_routes(app: Flask) -> None:

    @app.route("/api/apps", methods=["GET"])
    def api_apps():
        return jsonify(app_registry.catalog_to_json(gw().catalog))

    @app.route("/api/apps/for-extension", methods=["GET"])
    def api_apps_for_extension():
        ext = request.args.get("ext", "")
        return jsonify([a.to_dict() for a in app_registry.apps_for_extension(gw().catalog, ext)])

    @app.route("/api/user-paths", methods=["GET"])
    def api_user_paths():
        return jsonify(dict(gw().user_paths))

    @app.route("/api/system/drives", methods=["GET"])
    def api_drives():
        return jsonify(gw().platform.drives())

    @app.route("/api/lnk/resolve", methods=["GET"])
    def api_lnk_resolve():
        p = path_arg(required=True)
        return jsonify({"target": handle_paths.resolve_link(p, gw().platform)})

    @app.route("/api/settings/<app_id>", methods=["GET"])
    def api_settings_get(app_id):
        return jsonify(gw().settings.get(app_id))

    @app.route("/api/settings/<app_id>", methods=["POST"])
    def api_settings_set(app_id):
        gw().settings.set(app_id, json_body())
        return json_ok()

    @app.route("/api/files", methods=["GET"])
    def api_files():
        p = path_arg()
        return jsonify(list_directory(p, gw().platform, current_app.config["STAT_WORKERS"]))

    @app.route("/api/file/read", methods=["GET"])
    def api_file_read():
        p = path_arg(required=True)
        encoding = request.args.get("encoding") or None
        result = handle_content.read(p, encoding)
        if encoding == handle_content.HEX_MODE:
            return Response(result, mimetype="text/plain")
        text, detected = result
        return Response(text, content_type="text/plain; charset=utf-8",
                        headers={"X-Detected-Encoding": detected})

    @app.route("/api/media", methods=["GET"])
    def api_media():
        p = handle_content.media_path(path_arg(required=True))
        return send_file(p, conditional=True)

    @app.route("/api/file/write", methods=["POST"])
    def api_file_write():
        data = json_body()
        raw = request.args.get("path") or data.get("path")
        p = handle_paths.require_path(raw, current_app.config["INITIAL_DIR"])
        content = data.get("content")
        if not isinstance(content, str):
            raise BadRequest("content must be a string")
        handle_content.write_text(p, content)
        return json_ok()

    @app.route("/api/search", methods=["GET"])
    def api_search():
        q = request.args.get("q", "")
        return jsonify(handle_search.search(q, path_arg(), gw().catalog))

    @app.route("/api/stats", methods=["GET"])
    def api_stats():
        return jsonify(handle_stats.snapshot())

    @app.route("/api/terminal", methods=["POST"])
    def api_terminal():
        if not current_app.config["TRUSTED_EXEC"]:
            return json_err("Terminal execution is disabled", 403)
        data = json_body()
        command = data.get("command")
        if not command or not isinstance(command, str):
            raise BadRequest("missing command")
        cwd = data.get("cwd")
        if cwd is not None and not isinstance(cwd, str):
            raise BadRequest("cwd must be a string")
        initial = current_app.config["INITIAL_DIR"]
        return jsonify(handle_terminal.run_command(
            command, cwd=handle_paths.resolve(cwd, initial), default_cwd=initial))

    @app.route("/api/status", methods=["GET"])
    def api_status():
        return Response("OK", mimetype="text/plain")

    @app.route("/", defaults={"path": ""}, methods=["GET"])
    @app.route("/<path:path>", methods=["GET"])
    def static_asset(path):
        url_path = "/" + path
        if url_path.startswith(API_PREFIX):
            return json_err("Not Found", 404)
        asset = gw().assets.serve(url_path)
        if asset is None:
            return Response("Not Found", status=404, mimetype="text/plain")
        return Response(asset.content, mimetype=asset.mime)


def register_error_handlers(app: Flask) -> None:

    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            return Response("", status=200)

    @app.errorhandler(GatewayError)
    def gateway_error(e):
        if e.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return json_err(e.message, e.status)

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(e):
        if request.path.startswith(API_PREFIX):
            return json_err("Not Found", 404)
        return e

    @app.errorhandler(Exception)
    def unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("unhandled error on %s", request.path)
        return json_err("internal error: " + str(e), 500)


# ---------- app ----------
def create_app(overrides=None) -> Flask:
    config = default_config()
    config.update(overrides or {})
    platform = config["PLATFORM"] or _PLATFORM

    app = Flask("webdesk_server", static_folder=None)
    app.config.update(config)
    CORS(app, origins=config["ALLOW_ORIGINS"] or "*", expose_headers=["X-Detected-Encoding"])
    app.extensions["webdesk"] = Gateway(
        platform=platform,
        catalog=app_registry.load_catalog(config["APPS_FILE"] or None),
        user_paths=handle_paths.user_paths(platform),
        settings=SettingsStore(config["REGISTRY_DIR"]),
        assets=AssetCatalog.load(config["ASSETS_DIR"]),
    )
    register_routes(app)
    register_error_handlers(app)
    return app


def handle_signal(sig, frame):
    logger.info("Signal %s received, shutting down...", sig)
    sys.exit(0)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="WebDesk gateway: filesystem, shell and stats API for the WebDesk UI")
    p.add_argument("--host", default=HOST, help=f"Bind host (default {HOST})")
    p.add_argument("--port", type=int, default=PORT, help=f"Bind port (default {PORT})")
    p.add_argument("--root", default=None, help="Initial directory for empty paths (default: OS volume root)")
    p.add_argument("--assets", default=None, help="Directory of built UI assets")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    overrides = {}
    if args.root:
        overrides["INITIAL_DIR"] = os.path.abspath(args.root)
    if args.assets:
        overrides["ASSETS_DIR"] = os.path.abspath(args.assets)
    app = create_app(overrides)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info("WebDesk initial dir: %s", app.config["INITIAL_DIR"])
    logger.info("Settings registry: %s", app.config["REGISTRY_DIR"])
    logger.info("Binding host %s port %s", args.host, args.port)
    if app.config["TRUSTED_EXEC"]:
        logger.warning("Terminal endpoint enabled: commands run unsandboxed with this process's permissions.")
    app.run(host=args.host, port=args.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
