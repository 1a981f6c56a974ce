"""
L3 Detection — Host environment probe.

Read-only: parses OS release metadata, checks PATH for executables.
Never raises — missing data degrades to ``unknown`` values.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
from pathlib import Path

from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.services.installer.data.constants import (
    _IARCH_MAP,
    PACKAGE_MANAGER_PROBES,
)

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
LSB_RELEASE_PATH = Path("/etc/lsb-release")


def _parse_release_file(path: Path) -> dict[str, str]:
    """Parse a shell-style ``KEY=value`` file, unquoting values."""
    values: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return values

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, val = line.partition("=")
        val = val.strip()
        if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):
            val = val[1:-1]
        values[key.strip()] = val
    return values


def _detect_os_identity(
    os_release: Path = OS_RELEASE_PATH,
    lsb_release: Path = LSB_RELEASE_PATH,
) -> tuple[str, str, str]:
    """Return ``(id, version_id, pretty_name)``.

    /etc/os-release first, then /etc/lsb-release, then the kernel.
    """
    data = _parse_release_file(os_release)
    if data.get("ID"):
        os_id = data["ID"].lower()
        return (
            os_id,
            data.get("VERSION_ID", ""),
            data.get("PRETTY_NAME") or data.get("NAME") or os_id,
        )

    data = _parse_release_file(lsb_release)
    if data.get("DISTRIB_ID"):
        os_id = data["DISTRIB_ID"].lower()
        return (
            os_id,
            data.get("DISTRIB_RELEASE", ""),
            data.get("DISTRIB_DESCRIPTION") or data["DISTRIB_ID"],
        )

    system = platform.system() or "unknown"
    return system, platform.release(), system


def normalize_arch(machine: str) -> str:
    """Map a raw machine string to a Debian arch name (passthrough if unknown)."""
    if not machine:
        return "other"
    return _IARCH_MAP.get(machine.lower(), machine)


def detect_package_manager() -> str:
    """First package manager found on PATH, in fixed priority order."""
    for binary, pm in PACKAGE_MANAGER_PROBES:
        if shutil.which(binary):
            return pm
    return "unknown"


def probe(
    os_release: Path = OS_RELEASE_PATH,
    lsb_release: Path = LSB_RELEASE_PATH,
) -> EnvironmentDescriptor:
    """Inspect the host and return an immutable environment descriptor.

    Returns::

        EnvironmentDescriptor(
            os_id="ubuntu", os_version_id="24.04",
            os_pretty_name="Ubuntu 24.04 LTS", architecture="amd64",
            package_manager="apt", snap_available=True,
            can_elevate=True, is_root=False,
        )
    """
    os_id, version_id, pretty = _detect_os_identity(os_release, lsb_release)

    is_root = os.geteuid() == 0
    can_elevate = is_root or shutil.which("sudo") is not None

    env = EnvironmentDescriptor(
        os_id=os_id,
        os_version_id=version_id,
        os_pretty_name=pretty,
        architecture=normalize_arch(platform.machine()),
        package_manager=detect_package_manager(),
        snap_available=shutil.which("snap") is not None,
        can_elevate=can_elevate,
        is_root=is_root,
    )

    logger.info("OS: %s", env.os_pretty_name)
    logger.info("Architecture: %s", env.architecture)
    logger.info("Package manager: %s", env.package_manager)
    return env
