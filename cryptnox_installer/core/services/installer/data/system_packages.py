"""
L0 Data — System dependency sets per package manager.

Package names differ across distros; each list is the PC/SC smartcard
stack, Python tooling and build headers needed to run cryptnox-cli.
"""

from __future__ import annotations

SYSTEM_DEPS: dict[str, list[str]] = {
    "apt": [
        "pcscd",
        "libpcsclite1",
        "pcsc-tools",
        "python3-pip",
        "python3-venv",
        "python3-pyscard",
        "swig",
        "libpcsclite-dev",
    ],
    "dnf": [
        "pcsc-lite",
        "pcsc-lite-libs",
        "pcsc-tools",
        "python3-pip",
        "python3-pyscard",
        "swig",
        "pcsc-lite-devel",
    ],
    "pacman": [
        "pcsclite",
        "ccid",
        "python-pip",
        "python-pyscard",
        "swig",
    ],
    "zypper": [
        "pcsc-lite",
        "pcsc-ccid",
        "python3-pip",
        "python3-pyscard",
        "swig",
        "pcsc-lite-devel",
    ],
}
SYSTEM_DEPS["yum"] = SYSTEM_DEPS["dnf"]

# Package managers that need an index refresh before installing.
REFRESH_BEFORE_INSTALL: dict[str, list[str]] = {
    "apt": ["apt-get", "update"],
}

# Host packages for ``dpkg-buildpackage``.
DEB_BUILD_DEPS: list[str] = [
    "build-essential",
    "debhelper",
    "dh-python",
    "python3-all",
    "python3-setuptools",
    "python3-pip",
    "pybuild-plugin-pyproject",
    "swig",
    "libpcsclite-dev",
    "pcscd",
    "devscripts",
    "fakeroot",
]
