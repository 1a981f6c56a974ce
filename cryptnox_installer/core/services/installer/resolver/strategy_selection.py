"""
L2 Resolver — Installation strategy selection.

Maps the probed environment to one installation channel. The table is
keyed by OS family; each family has its own strategy for hosts
without Snap, which decides the dependency set that gets installed.
"""

from __future__ import annotations

import logging
from enum import Enum

from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.models.outcome import InstallationStrategy

logger = logging.getLogger(__name__)


class OsFamily(str, Enum):
    DEBIAN = "debian"
    RPM = "rpm"
    ARCH = "arch"
    SUSE = "suse"
    OTHER = "other"


FAMILY_IDS: dict[OsFamily, frozenset[str]] = {
    OsFamily.DEBIAN: frozenset(
        {"ubuntu", "debian", "linuxmint", "pop", "elementary", "zorin"}
    ),
    OsFamily.RPM: frozenset({"fedora", "rhel", "centos", "rocky", "alma"}),
    OsFamily.ARCH: frozenset({"arch", "manjaro", "endeavouros"}),
}

# Family → strategy when Snap is not available.
_WITHOUT_SNAP: dict[OsFamily, InstallationStrategy] = {
    OsFamily.DEBIAN: InstallationStrategy.DEB,
    OsFamily.RPM: InstallationStrategy.RPM,
    OsFamily.ARCH: InstallationStrategy.NATIVE,
    OsFamily.SUSE: InstallationStrategy.NATIVE,
}


def os_family(os_id: str) -> OsFamily:
    """Classify an ``/etc/os-release`` ID. ``opensuse*`` matches by prefix."""
    os_id = os_id.lower()
    for family, ids in FAMILY_IDS.items():
        if os_id in ids:
            return family
    if os_id.startswith("opensuse"):
        return OsFamily.SUSE
    return OsFamily.OTHER


def select_strategy(env: EnvironmentDescriptor) -> InstallationStrategy:
    """Choose the installation strategy for this host. Total: never fails.

    Recognised families prefer Snap when it is available, otherwise use
    their family default. Unrecognised distributions always get native pip.
    """
    family = os_family(env.os_id)

    if family is OsFamily.OTHER:
        logger.warning(
            "Unrecognized distribution '%s', using native pip installation",
            env.os_id,
        )
        return InstallationStrategy.NATIVE

    if env.snap_available:
        return InstallationStrategy.SNAP

    return _WITHOUT_SNAP[family]
