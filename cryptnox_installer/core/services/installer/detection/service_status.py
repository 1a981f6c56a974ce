"""
L3 Detection — Smartcard service and device status.

Read-only probes: systemctl state of the PC/SC daemon, snap interface
connections, and a time-bounded card-reader scan.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from cryptnox_installer.core.context import get_config

logger = logging.getLogger(__name__)

_INTERFACE_MARKERS = ("raw-usb", "hardware")


# ── Init system detection ──

def _detect_init_system() -> str:
    """Detect the init system (systemd, openrc, initd, or unknown)."""
    if Path("/run/systemd/system").exists():
        return "systemd"
    if shutil.which("rc-service"):
        return "openrc"
    if Path("/etc/init.d").exists():
        return "initd"
    return "unknown"


def get_service_status(service: str | None = None) -> dict:
    """Get service status (systemd only).

    Returns active state, sub-state, load state for systemd services.
    Falls back to ``systemctl is-active`` when ``systemctl show`` gives
    nothing, and to an unknown state for other init systems.
    """
    service = service or get_config().service_name
    timeout = get_config().probe_timeout
    init = _detect_init_system()

    if init == "systemd" and shutil.which("systemctl"):
        result: dict = {}
        for prop in ("ActiveState", "SubState", "LoadState"):
            try:
                r = subprocess.run(
                    ["systemctl", "show", service, f"--property={prop}"],
                    capture_output=True, text=True, timeout=timeout,
                )
                key, _, val = r.stdout.strip().partition("=")
                if key:
                    result[key.lower()] = val
            except (subprocess.TimeoutExpired, OSError) as exc:
                logger.debug("systemctl show %s failed: %s", prop, exc)

        if "activestate" not in result:
            try:
                r = subprocess.run(
                    ["systemctl", "is-active", service],
                    capture_output=True, text=True, timeout=timeout,
                )
                result["activestate"] = r.stdout.strip() or "unknown"
            except (subprocess.TimeoutExpired, OSError):
                pass

        return {
            "service": service,
            "init_system": "systemd",
            "active": result.get("activestate") == "active",
            "state": result.get("activestate", "unknown"),
            "sub_state": result.get("substate", "unknown"),
            "loaded": result.get("loadstate") == "loaded",
        }

    return {"service": service, "init_system": init, "active": None, "state": "unknown"}


def get_snap_interfaces(snap_name: str | None = None) -> list[str]:
    """Device-access lines from ``snap connections`` (raw-usb / hardware only)."""
    snap_name = snap_name or get_config().snap_name
    if not shutil.which("snap"):
        return []
    try:
        r = subprocess.run(
            ["snap", "connections", snap_name],
            capture_output=True, text=True, timeout=get_config().probe_timeout,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("snap connections failed: %s", exc)
        return []
    if r.returncode != 0:
        return []
    return [
        line.rstrip()
        for line in r.stdout.splitlines()
        if any(marker in line for marker in _INTERFACE_MARKERS)
    ]


def scan_card_readers(timeout: int | None = None) -> dict:
    """List attached PC/SC readers with ``pcsc_scan -r``.

    Bounded by a short timeout: a wedged daemon or reader must not hang
    the status report.

    Returns::

        {"status": "ok", "readers": ["0: ACS ACR122U ..."]}
        {"status": "unavailable" | "timeout" | "error", "readers": []}
    """
    timeout = timeout or get_config().reader_scan_timeout
    if not shutil.which("pcsc_scan"):
        return {"status": "unavailable", "readers": []}
    try:
        r = subprocess.run(
            ["pcsc_scan", "-r"],
            capture_output=True, text=True, timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Card reader scan timed out after %ss", timeout)
        return {"status": "timeout", "readers": []}
    except OSError as exc:
        logger.warning("Card reader scan failed: %s", exc)
        return {"status": "error", "readers": []}

    if r.returncode != 0:
        return {"status": "error", "readers": []}

    readers = [
        line.strip()
        for line in r.stdout.splitlines()
        if line.strip()[:1].isdigit() and ":" in line
    ]
    return {"status": "ok", "readers": readers}
