"""
L4 Execution — System dependency installation.

Installs the PC/SC stack and Python tooling with the host's package
manager, then enables the smartcard daemon.
"""

from __future__ import annotations

import logging
import shutil
from typing import Any

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.services.installer.data.system_packages import (
    REFRESH_BEFORE_INSTALL,
    SYSTEM_DEPS,
)
from cryptnox_installer.core.services.installer.errors import (
    InstallerError,
    MissingElevationTool,
)
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.resolver.command_building import (
    _build_pkg_install_cmd,
)

logger = logging.getLogger(__name__)


def require_elevation(env: EnvironmentDescriptor) -> None:
    """Fail fast when root is needed and ``sudo`` is unavailable.

    Raises:
        MissingElevationTool: Not root and no ``sudo`` on PATH.
    """
    if not env.is_root and not env.can_elevate:
        raise MissingElevationTool()


def install_system_deps(env: EnvironmentDescriptor) -> dict[str, Any]:
    """Install the smartcard stack for the detected package manager.

    An unknown package manager is not fatal: it yields a warning and a
    manual-action hint.

    Returns:
        ``{"ok": True, "packages": [...]}``,
        ``{"ok": True, "skipped": True, "warning": "..."}`` (unknown PM).

    Raises:
        InstallerError: When the package manager command fails.
    """
    require_elevation(env)
    pm = env.package_manager
    packages = SYSTEM_DEPS.get(pm)
    cmd = _build_pkg_install_cmd(list(packages), pm) if packages else None

    if cmd is None:
        msg = "Unknown package manager. Install pcscd manually."
        logger.warning(msg)
        return {"ok": True, "skipped": True, "warning": msg}

    logger.info("Installing system dependencies via %s...", pm)
    timeout = get_config().command_timeout

    refresh = REFRESH_BEFORE_INSTALL.get(pm)
    if refresh:
        r = _run_subprocess(refresh, needs_sudo=True, timeout=timeout)
        if not r["ok"]:
            raise InstallerError(
                f"Package index refresh failed: {r.get('stderr') or r['error']}"
            )

    r = _run_subprocess(cmd, needs_sudo=True, timeout=timeout)
    if not r["ok"]:
        raise InstallerError(
            f"System dependency installation failed: {r.get('stderr') or r['error']}"
        )

    enable_service(env)
    return {"ok": True, "packages": packages}


def enable_service(env: EnvironmentDescriptor, service: str | None = None) -> bool:
    """Enable and start the PC/SC daemon. Best-effort.

    Returns:
        True when both ``enable`` and ``start`` succeeded.
    """
    service = service or get_config().service_name
    if not shutil.which("systemctl"):
        logger.debug("systemctl not available, not enabling %s", service)
        return False

    ok = True
    for verb in ("enable", "start"):
        r = _run_subprocess(["systemctl", verb, service], needs_sudo=True, timeout=60)
        if not r["ok"]:
            logger.warning("systemctl %s %s failed: %s", verb, service, r["error"])
            ok = False
    return ok
