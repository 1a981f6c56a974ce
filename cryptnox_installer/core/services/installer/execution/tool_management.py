"""
L4 Execution — Per-channel upgrade and removal.

Low-level reverse/upgrade operations for an installed cryptnox-cli.
Channel detection and the fan-out over channels live in the
orchestration layer.
"""

from __future__ import annotations

import logging
from typing import Any

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.models.outcome import InstallationStrategy
from cryptnox_installer.core.services.installer.data.undo_catalog import UNDO_COMMANDS
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.resolver.command_building import (
    _build_pkg_install_cmd,
    _derive_update_cmd,
    pip_install_variants,
    pip_uninstall_variants,
)

logger = logging.getLogger(__name__)

_RPM_MANAGERS = ("dnf", "yum", "zypper")


def refresh_snap() -> dict[str, Any]:
    """``snap refresh <name>``."""
    cfg = get_config()
    logger.info("Updating snap...")
    return _run_subprocess(
        ["snap", "refresh", cfg.snap_name], needs_sudo=True, timeout=cfg.command_timeout,
    )


def upgrade_rpm(env: EnvironmentDescriptor) -> dict[str, Any]:
    """Upgrade the RPM package through the host's package manager."""
    cfg = get_config()
    pm = env.package_manager
    install_cmd = _build_pkg_install_cmd([cfg.package_name], pm) if pm in _RPM_MANAGERS else None
    cmd = _derive_update_cmd(install_cmd, pm) if install_cmd else None
    if cmd is None:
        return {"ok": False, "error": f"No RPM upgrade command for package manager '{pm}'"}
    logger.info("Updating RPM package via %s...", pm)
    return _run_subprocess(cmd, needs_sudo=True, timeout=cfg.command_timeout)


def upgrade_pip() -> dict[str, Any]:
    """``pip install --user --upgrade``, plain variant first."""
    cfg = get_config()
    logger.info("Updating pip package...")
    result: dict[str, Any] = {"ok": False, "error": "no pip variant ran"}
    for cmd in pip_install_variants(
        [cfg.package_name], upgrade=True, break_system_packages_first=False,
    ):
        result = _run_subprocess(cmd, timeout=cfg.command_timeout)
        if result["ok"]:
            return result
    logger.error("Update failed")
    return result


def _undo_key(channel: InstallationStrategy, env: EnvironmentDescriptor) -> str | None:
    if channel is InstallationStrategy.SNAP:
        return "snap"
    if channel is InstallationStrategy.DEB:
        return "deb"
    if channel is InstallationStrategy.RPM:
        return env.package_manager if env.package_manager in _RPM_MANAGERS else None
    return None


def remove_channel(channel: InstallationStrategy, env: EnvironmentDescriptor) -> dict[str, Any]:
    """Remove cryptnox-cli from one channel.

    Uses the ``UNDO_COMMANDS`` catalog. The first command decides success;
    follow-ups (``apt-get autoremove``) are best-effort.

    Returns:
        ``{"ok": True}`` or an error dict.
    """
    cfg = get_config()
    package = cfg.snap_name if channel is InstallationStrategy.SNAP else cfg.package_name

    if channel is InstallationStrategy.NATIVE:
        logger.info("Removing pip package...")
        result: dict[str, Any] = {"ok": False, "error": "no pip variant ran"}
        for cmd in pip_uninstall_variants(package):
            result = _run_subprocess(cmd, timeout=cfg.command_timeout)
            if result["ok"]:
                break
        return result

    key = _undo_key(channel, env)
    undo = UNDO_COMMANDS.get(key) if key else None
    if undo is None:
        return {
            "ok": False,
            "error": f"No removal method for {channel.value} "
                     f"(package manager: {env.package_manager})",
        }

    logger.info("Removing %s...", channel.label)
    commands = [[t.replace("{package}", package) for t in cmd] for cmd in undo["commands"]]
    first, rest = commands[0], commands[1:]
    result = _run_subprocess(first, needs_sudo=undo["needs_sudo"], timeout=cfg.command_timeout)
    if not result["ok"]:
        return result
    for cmd in rest:
        follow = _run_subprocess(cmd, needs_sudo=undo["needs_sudo"], timeout=cfg.command_timeout)
        if not follow["ok"]:
            logger.warning("'%s' failed: %s", " ".join(cmd), follow["error"])
    return result
