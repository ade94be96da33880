#!/usr/bin/env python3
"""
handle_terminal: run a command line through the OS shell.

Trusted local execution: no sandbox, no timeout, no output cap. Failures come
back as ordinary output so the client can always render something.
"""
import logging
import subprocess

from handlers.errors import CommandFault

log = logging.getLogger("webdesk.terminal")


def _decode(b):
    return (b or b"").decode("utf-8", errors="replace")


def _spawn(command, cwd):
    try:
        return subprocess.run(command, shell=True, cwd=cwd,
                              stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except (OSError, ValueError) as e:
        raise CommandFault(str(e))


def run_command(command, cwd=None, default_cwd="/"):
    """Return {stdout, stderr, exitCode}; never raises for command failures."""
    workdir = cwd or default_cwd
    log.info("terminal: %r (cwd=%s)", command, workdir)
    try:
        proc = _spawn(command, workdir)
    except CommandFault as fault:
        log.warning("terminal spawn failed: %s", fault)
        return fault.as_output()
    stdout, stderr = _decode(proc.stdout), _decode(proc.stderr)
    if proc.returncode != 0 and not stderr:
        stderr = f"Command failed with exit code {proc.returncode}: {command}"
    return {"stdout": stdout, "stderr": stderr, "exitCode": proc.returncode}
