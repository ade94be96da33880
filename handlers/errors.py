#!/usr/bin/env python3
"""
Gateway error taxonomy.

Raised by the handle_* modules, mapped to HTTP status codes once in
webdesk_server. EntryStatFault and CommandFault never leave their handler:
they are folded back into an otherwise successful result.
"""


class GatewayError(Exception):
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class PathError(GatewayError):
    """Client supplied a path (or path-like id) that cannot be used."""
    status = 400


class BadRequest(GatewayError):
    """Malformed request body or arguments."""
    status = 400


class UnknownEncoding(GatewayError):
    status = 400


class ListingFault(GatewayError):
    """Directory itself could not be enumerated (404 / 403 / 400)."""
    status = 403


class IOFault(GatewayError):
    status = 500


class EntryStatFault(GatewayError):
    """One entry's metadata is unavailable; the listing carries on."""

    def __init__(self, name, is_dir, message="Stat failed"):
        super().__init__(message)
        self.name = name
        self.is_dir = is_dir

    def as_entry(self):
        return {"name": self.name, "isDirectory": self.is_dir, "error": self.message}


class CommandFault(GatewayError):
    """Shell command could not be started at all."""

    def as_output(self):
        return {"stdout": "", "stderr": self.message, "exitCode": None}
