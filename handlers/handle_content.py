#!/usr/bin/env python3
"""
handle_content: file bytes -> hex string, decoded text (sniffed encoding) or raw media.
"""
from __future__ import annotations
import codecs
import logging
import os
from typing import Optional, Tuple

from charset_normalizer import from_bytes

from handlers.errors import IOFault, UnknownEncoding

log = logging.getLogger("webdesk.content")

HEX_MODE = "hex"
WRITE_ENCODING = "utf-8"
FALLBACK_ENCODING = "utf-8"


def read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise IOFault(f"read error: {e.strerror or e}")


def read_hex(path: str) -> str:
    """Two lowercase hex digits per byte."""
    return read_bytes(path).hex()


def canonical_encoding(name: str) -> str:
    try:
        info = codecs.lookup(name)
    except LookupError:
        raise UnknownEncoding(f"Unknown encoding: {name}")
    # bytes-to-bytes and str-to-str codecs (rot13, base64, zlib) cannot decode text
    if not getattr(info, "_is_text_encoding", True):
        raise UnknownEncoding(f"Not a text encoding: {name}")
    return info.name


def detect_encoding(raw: bytes) -> str:
    # valid UTF-8 (ASCII included) is taken as-is; the sniffer only decides the rest
    try:
        raw.decode("utf-8")
        return FALLBACK_ENCODING
    except UnicodeDecodeError:
        pass
    best = from_bytes(raw).best()
    if best is None:
        return FALLBACK_ENCODING
    return canonical_encoding(best.encoding)


def read_text(path: str, encoding: Optional[str] = None) -> Tuple[str, str]:
    """Return (text, detected). An explicit encoding overrides the sniffed one,
    the sniffed one is reported either way."""
    raw = read_bytes(path)
    detected = detect_encoding(raw)
    chosen = canonical_encoding(encoding) if encoding else detected
    try:
        return raw.decode(chosen, errors="replace"), detected
    except LookupError:
        raise UnknownEncoding(f"Not a text encoding: {encoding or chosen}")


def read(path: str, encoding: Optional[str] = None):
    """hex mode -> str of hex digits; otherwise (text, detected)."""
    if encoding == HEX_MODE:
        return read_hex(path)
    return read_text(path, encoding)


def media_path(path: str) -> str:
    if not os.path.isfile(path):
        raise IOFault(f"media not found: {path}")
    return path


def write_text(path: str, content: str) -> None:
    """Overwrite the file wholesale. No locking: concurrent writers, last one wins."""
    try:
        with open(path, "w", encoding=WRITE_ENCODING, newline="") as f:
            f.write(content)
    except OSError as e:
        raise IOFault(f"write error: {e.strerror or e}")
    log.info("Wrote file %s (%d chars)", path, len(content))
