"""
L5 Orchestration — Status and lifecycle.

Queries every channel live (no caching) and fans update/uninstall out
to whichever channels currently hold cryptnox-cli.
"""

from __future__ import annotations

import logging

from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.models.outcome import (
    InstallationOutcome,
    InstallationStrategy,
    SystemStatusReport,
    UninstallReport,
)
from cryptnox_installer.core.services.installer.detection import channels, service_status
from cryptnox_installer.core.services.installer.errors import InstallerError
from cryptnox_installer.core.services.installer.execution import tool_management
from cryptnox_installer.core.services.installer.execution.system_deps import (
    require_elevation,
)
from cryptnox_installer.core.services.installer.orchestration import orchestrator
from cryptnox_installer.core.services.installer.resolver.version_resolution import (
    fetch_latest_version,
)

logger = logging.getLogger(__name__)


def versions() -> dict[InstallationStrategy, str]:
    """Installed version per channel; channels not installed are absent."""
    return channels.get_installed_versions()


def latest_version() -> str | None:
    """Latest version on PyPI, or None when unreachable."""
    return fetch_latest_version() or None


def status(env: EnvironmentDescriptor, *, scan_readers: bool = True) -> SystemStatusReport:
    """Compose daemon liveness, installed versions and snap grants."""
    installed = versions()
    report = SystemStatusReport(
        service=service_status.get_service_status(),
        versions=installed,
        latest=latest_version(),
    )

    if InstallationStrategy.SNAP in installed:
        report.snap_interfaces = service_status.get_snap_interfaces()

    if scan_readers:
        scan = service_status.scan_card_readers()
        report.readers = scan["readers"]
        report.reader_scan = scan["status"]

    return report


def update(env: EnvironmentDescriptor, version: str) -> InstallationOutcome:
    """Upgrade through the active channel, or install if nothing is installed.

    Active channel priority: snap > deb > rpm > pip.

    Raises:
        InstallerError: The channel's upgrade command failed.
    """
    active = channels.detect_active_channel()

    if active is None:
        logger.warning("cryptnox not installed; running a fresh installation")
        return orchestrator.install_auto(version, env)

    logger.info("Active channel: %s", active.value)

    if active is InstallationStrategy.DEB:
        return orchestrator.execute(InstallationStrategy.DEB, version, env)

    if active is InstallationStrategy.SNAP:
        require_elevation(env)
        result = tool_management.refresh_snap()
    elif active is InstallationStrategy.RPM:
        require_elevation(env)
        result = tool_management.upgrade_rpm(env)
    else:
        result = tool_management.upgrade_pip()

    if not result["ok"]:
        raise InstallerError(
            f"{active.label} update failed: {result.get('stderr') or result['error']}"
        )

    return InstallationOutcome(
        requested=active,
        channel=active,
        success=True,
        message=f"Updated via {active.label}",
    )


def uninstall(env: EnvironmentDescriptor) -> UninstallReport:
    """Remove cryptnox-cli from every channel where it is installed.

    Idempotent: with nothing installed the report is empty and a warning
    is logged. Each channel is re-checked right before its removal, so
    ``removed`` only lists channels this call actually removed. A failed
    removal on one channel does not stop the others.
    """
    installed = versions()
    report = UninstallReport()

    if not installed:
        logger.warning("cryptnox is not installed via any channel")
        return report

    if any(ch is not InstallationStrategy.NATIVE for ch in installed):
        require_elevation(env)

    for channel in installed:
        # An earlier removal may have taken this copy with it.
        if channels.channel_version(channel) is None:
            logger.info("%s installation already gone", channel.label)
            continue
        result = tool_management.remove_channel(channel, env)
        if result["ok"]:
            report.removed.add(channel)
        else:
            logger.error(
                "Removing %s failed: %s", channel.label,
                result.get("stderr") or result.get("error", ""),
            )
            report.failed.add(channel)

    return report
