#!/usr/bin/env python3
"""
handle_stats: point-in-time CPU / memory / OS snapshot. Nothing is cached.
"""
import os
import platform
import socket
import sys
import time

import psutil


def cpu_model():
    if sys.platform.startswith("linux"):
        try:
            with open("/proc/cpuinfo", "r") as f:
                for line in f:
                    if line.startswith("model name"):
                        return line.split(":", 1)[1].strip()
        except OSError:
            pass
    return platform.processor() or "Unknown CPU"


def load_average():
    try:
        return list(os.getloadavg())
    except (AttributeError, OSError):
        return list(psutil.getloadavg())


def cpu_times():
    out = []
    for t in psutil.cpu_times(percpu=True):
        out.append({
            "user": t.user,
            "nice": getattr(t, "nice", 0.0),
            "sys": t.system,
            "idle": t.idle,
            "irq": getattr(t, "irq", 0.0),
        })
    return out


def snapshot():
    vm = psutil.virtual_memory()
    used = vm.total - vm.available
    return {
        "cpu": {
            "model": cpu_model(),
            "cores": psutil.cpu_count(logical=True) or 0,
            "load": load_average(),
            "times": cpu_times(),
        },
        "memory": {
            "total": vm.total,
            "free": vm.available,
            "used": used,
            "percentage": round(used / vm.total * 100, 2) if vm.total else 0.0,
        },
        "system": {
            "platform": sys.platform,
            "arch": platform.machine(),
            "release": platform.release(),
            "uptime": round(time.time() - psutil.boot_time(), 2),
            "hostname": socket.gethostname(),
        },
    }
