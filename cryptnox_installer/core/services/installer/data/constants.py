"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

import re

# The interpreter pip installs into. The installer may itself run from a
# venv, but cryptnox-cli belongs in the user's system Python.
_PIP: list[str] = ["python3", "-m", "pip"]

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[A-Za-z0-9.]+)?$")

# Raw ``uname -m`` → Debian architecture name. Anything else passes through.
_IARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# (executable, package manager id) in detection priority order.
PACKAGE_MANAGER_PROBES: tuple[tuple[str, str], ...] = (
    ("apt-get", "apt"),
    ("dnf", "dnf"),
    ("yum", "yum"),
    ("pacman", "pacman"),
    ("zypper", "zypper"),
)

# Release tags the .deb artifacts are built for.
DEB_OS_TAG_DEFAULT = "ubuntu-22.04"
DEB_OS_TAGS: dict[str, str] = {
    "24.": "ubuntu-24.04",
}

SCRATCH_PREFIX = "cryptnox-install."

# ``pip show`` also lists distributions installed by dpkg/rpm. Anything
# under these roots belongs to the system package manager, not to pip.
SYSTEM_SITE_PREFIXES: tuple[str, ...] = (
    "/usr/lib/python3",
    "/usr/lib64/python3",
    "/usr/share/",
)
