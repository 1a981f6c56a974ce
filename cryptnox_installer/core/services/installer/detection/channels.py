"""
L3 Detection — Installed-version probes per channel.

Read-only queries against each package database: snap list, dpkg,
rpm and pip metadata. A channel that is not installed (or whose
query tool is missing) is simply absent from the result.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.outcome import InstallationStrategy
from cryptnox_installer.core.services.installer.data.constants import _PIP, SYSTEM_SITE_PREFIXES

logger = logging.getLogger(__name__)

# Priority order for update(): the first installed channel is "active".
CHANNEL_PRIORITY: tuple[InstallationStrategy, ...] = (
    InstallationStrategy.SNAP,
    InstallationStrategy.DEB,
    InstallationStrategy.RPM,
    InstallationStrategy.NATIVE,
)


def _query(cmd: list[str]) -> subprocess.CompletedProcess | None:
    """Run a read-only query; None when the tool is missing or hangs."""
    if not shutil.which(cmd[0]):
        return None
    try:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=get_config().probe_timeout,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("Query %s failed: %s", cmd[0], exc)
        return None


def snap_version() -> str | None:
    """Version from ``snap list <name>`` (second column of the last row)."""
    r = _query(["snap", "list", get_config().snap_name])
    if r is None or r.returncode != 0:
        return None
    lines = [ln for ln in r.stdout.strip().splitlines() if ln.strip()]
    if len(lines) < 2:
        return None
    parts = lines[-1].split()
    return parts[1] if len(parts) > 1 else None


def deb_version() -> str | None:
    """Version from the dpkg database, only for fully installed packages."""
    r = _query([
        "dpkg-query", "-W", "-f=${Status}\t${Version}", get_config().package_name,
    ])
    if r is None or r.returncode != 0:
        return None
    status, _, version = r.stdout.partition("\t")
    if "install ok installed" not in status:
        return None
    return version.strip() or None


def rpm_version() -> str | None:
    """Version from the RPM database."""
    r = _query(["rpm", "-q", "--qf", "%{VERSION}", get_config().package_name])
    if r is None or r.returncode != 0:
        return None
    return r.stdout.strip() or None


def pip_version() -> str | None:
    """Version from ``pip show`` metadata, for pip-owned installs only.

    A .deb or .rpm install lands in the system site-packages and shows up
    in ``pip show`` as well; that copy belongs to the DEB/RPM channel.
    """
    r = _query(_PIP + ["show", get_config().package_name])
    if r is None or r.returncode != 0:
        return None
    loc = re.search(r"^Location:\s*(\S+)", r.stdout, re.MULTILINE)
    if loc and loc.group(1).startswith(SYSTEM_SITE_PREFIXES):
        logger.debug("pip sees a system-managed copy at %s", loc.group(1))
        return None
    m = re.search(r"^Version:\s*(\S+)", r.stdout, re.MULTILINE)
    return m.group(1) if m else None


_PROBES = {
    InstallationStrategy.SNAP: snap_version,
    InstallationStrategy.DEB: deb_version,
    InstallationStrategy.RPM: rpm_version,
    InstallationStrategy.NATIVE: pip_version,
}


def get_installed_versions() -> dict[InstallationStrategy, str]:
    """Probe every channel independently.

    Returns:
        ``{InstallationStrategy.SNAP: "1.0.3", InstallationStrategy.NATIVE: "1.0.2"}``
        — in priority order, channels not installed omitted.
    """
    versions: dict[InstallationStrategy, str] = {}
    for channel in CHANNEL_PRIORITY:
        version = _PROBES[channel]()
        if version:
            versions[channel] = version
    return versions


def detect_active_channel() -> InstallationStrategy | None:
    """Highest-priority channel that currently has the tool installed."""
    for channel in CHANNEL_PRIORITY:
        if _PROBES[channel]():
            return channel
    return None


def channel_version(channel: InstallationStrategy) -> str | None:
    """Live version for one channel; None when it is not installed."""
    return _PROBES[channel]()
