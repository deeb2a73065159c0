"""
Host descriptor included at the top of every report.

The scan treats this as an opaque blob: each field is looked up on its own
and a failed lookup is logged and left as None.
"""
import logging
import platform
import socket
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import psutil

MACHINE_ID_FILES = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))


def _machine_id() -> Optional[str]:
    for p in MACHINE_ID_FILES:
        if p.exists():
            return p.read_text(encoding="utf-8").strip() or None
    return None


def _safe(name: str, fn: Callable[[], Any]) -> Any:
    try:
        return fn()
    except Exception as e:
        logging.warning(f"Host info lookup '{name}' failed: {e}")
        return None


def collect_host_info() -> Dict[str, Any]:
    boot_time = _safe("boot_time", psutil.boot_time)

    return {
        "hostname": _safe("hostname", socket.gethostname),
        "uptime": int(time.time() - boot_time) if boot_time else None,
        "boot_time": int(boot_time) if boot_time else None,
        "procs": _safe("procs", lambda: len(psutil.pids())),
        "os": _safe("os", lambda: platform.system().lower()),
        "platform": _safe("platform", platform.platform),
        "platform_version": _safe("platform_version", platform.version),
        "kernel_version": _safe("kernel_version", platform.release),
        "kernel_arch": _safe("kernel_arch", platform.machine),
        "host_id": _safe("host_id", _machine_id),
    }
