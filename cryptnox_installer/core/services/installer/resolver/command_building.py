"""
L2 Resolver — Command construction.

Turns package manager IDs, package lists and versions into concrete
command lists and artifact names. Pure: no I/O, no subprocess.
"""

from __future__ import annotations

import logging

from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.services.installer.data.constants import (
    _PIP,
    DEB_OS_TAG_DEFAULT,
    DEB_OS_TAGS,
)

logger = logging.getLogger(__name__)

_BREAK_SYSTEM_PACKAGES = "--break-system-packages"


def _build_pkg_install_cmd(packages: list[str], pm: str) -> list[str] | None:
    """Build a package-install command for a list of packages.

    Args:
        packages: Package names to install.
        pm: Package manager ID.

    Returns:
        Command list suitable for subprocess.run(), or None for an
        unknown package manager.
    """
    if pm == "apt":
        return ["apt-get", "install", "-y"] + packages
    if pm == "dnf":
        return ["dnf", "install", "-y"] + packages
    if pm == "yum":
        return ["yum", "install", "-y"] + packages
    if pm == "zypper":
        return ["zypper", "install", "-y"] + packages
    if pm == "pacman":
        # Full sync: partial upgrades are unsupported on Arch
        return ["pacman", "-Syu", "--noconfirm"] + packages
    logger.error("No install command for package manager: %s", pm)
    return None


# PM → (install_verb, update_verb)
# The derivation replaces `install_verb` with `update_verb` in the command.
_PM_UPDATE_RULES: dict[str, tuple[str, str]] = {
    # dnf install -y PKG  →  dnf upgrade -y PKG
    "dnf":    ("install", "upgrade"),
    # yum install -y PKG  →  yum update -y PKG
    "yum":    ("install", "update"),
    # zypper install -y PKG  →  zypper update -y PKG
    "zypper": ("install", "update"),
}


def _derive_update_cmd(install_cmd: list[str], pm: str) -> list[str] | None:
    """Derive an upgrade command from an install command for a given PM.

    Returns ``None`` if the PM has no derivation rule or the command
    doesn't contain the expected verb.
    """
    rule = _PM_UPDATE_RULES.get(pm)
    if not rule:
        return None

    install_verb, update_verb = rule
    cmd = list(install_cmd)
    try:
        idx = cmd.index(install_verb)
    except ValueError:
        return None

    cmd[idx] = update_verb
    return cmd


def pip_install_variants(
    packages: list[str],
    *,
    upgrade: bool = False,
    break_system_packages_first: bool = True,
) -> list[list[str]]:
    """The two ``pip install --user`` variants, in the order to try them.

    ``--break-system-packages`` is needed on PEP 668 distros (Python
    3.11+) and rejected by older pips; the caller tries both and keeps
    the first success.
    """
    base = _PIP + ["install", "--user"]
    if upgrade:
        base.append("--upgrade")
    with_flag = base + [_BREAK_SYSTEM_PACKAGES] + packages
    without = base + packages
    if break_system_packages_first:
        return [with_flag, without]
    return [without, with_flag]


def pip_uninstall_variants(package: str) -> list[list[str]]:
    return [
        _PIP + ["uninstall", "-y", package],
        _PIP + ["uninstall", _BREAK_SYSTEM_PACKAGES, "-y", package],
    ]


def deb_os_tag(env: EnvironmentDescriptor) -> str:
    """Release tag of the prebuilt ``.deb`` matching this host.

    Ubuntu 24.x maps to ``ubuntu-24.04``; everything else, including
    Debian and future Ubuntu releases, maps to ``ubuntu-22.04``.
    """
    if env.os_id == "ubuntu":
        for prefix, tag in DEB_OS_TAGS.items():
            if env.os_version_id.startswith(prefix):
                return tag
    if not (env.os_id == "ubuntu" and env.os_version_id.startswith("22.")):
        logger.warning(
            "No prebuilt package for %s %s, using the %s build",
            env.os_id, env.os_version_id or "?", DEB_OS_TAG_DEFAULT,
        )
    return DEB_OS_TAG_DEFAULT


def deb_artifact_name(package: str, version: str, env: EnvironmentDescriptor) -> str:
    """E.g. ``cryptnox-cli_1.0.3-1_amd64_ubuntu-22.04.deb``."""
    return f"{package}_{version}-1_{env.architecture}_{deb_os_tag(env)}.deb"
