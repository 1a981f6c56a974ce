"""
L5 Orchestration — Strategy execution with fallback.

Dispatches an installation strategy to its executor and turns the
result into an ``InstallationOutcome``. The only built-in resilience is
the Debian-package → native-pip fallback on a failed download.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.models.outcome import (
    InstallationOutcome,
    InstallationStrategy,
)
from cryptnox_installer.core.services.installer.execution import strategies
from cryptnox_installer.core.services.installer.resolver.strategy_selection import (
    select_strategy,
)

logger = logging.getLogger(__name__)

_FALLBACKS: dict[InstallationStrategy, InstallationStrategy] = {
    InstallationStrategy.DEB: InstallationStrategy.NATIVE,
}


def _dispatch(
    strategy: InstallationStrategy,
) -> Callable[[EnvironmentDescriptor, str], dict[str, Any]]:
    # Looked up at call time so tests can patch the strategy functions.
    table: dict[InstallationStrategy, Callable[[EnvironmentDescriptor, str], dict[str, Any]]] = {
        InstallationStrategy.SNAP: lambda env, version: strategies.install_snap(env),
        InstallationStrategy.DEB: strategies.install_deb,
        InstallationStrategy.RPM: lambda env, version: strategies.install_pip(env),
        InstallationStrategy.NATIVE: lambda env, version: strategies.install_pip(env),
    }
    return table[strategy]


def _notes_for(result: dict[str, Any]) -> list[str]:
    notes: list[str] = []
    for iface, granted in result.get("interfaces", {}).items():
        if not granted:
            notes.append(f"Interface {iface} not connected; card reader access may be limited")
    if result.get("checksum") == "skipped":
        notes.append("Checksum verification skipped")
    if result.get("python_extras") is False:
        notes.append("Some pip dependencies may not have installed")
    if result.get("path_hint"):
        notes.append(
            "Add ~/.local/bin to your PATH: "
            "echo 'export PATH=$HOME/.local/bin:$PATH' >> ~/.bashrc"
        )
    return notes


def execute(
    strategy: InstallationStrategy,
    version: str,
    env: EnvironmentDescriptor,
) -> InstallationOutcome:
    """Run one installation strategy, falling back where one is defined.

    Args:
        strategy: Requested channel.
        version: Resolved target version (used by the ``.deb`` path).
        env: Probed environment.

    Returns:
        Outcome whose ``channel`` is the strategy that actually ran.

    Raises:
        InstallerError: Any fatal failure (checksum, wrong PM, pip, ...).
    """
    logger.info("Executing %s strategy for version %s", strategy.value, version)
    result = _dispatch(strategy)(env, version)

    if result.get("ok"):
        return InstallationOutcome(
            requested=strategy,
            channel=strategy,
            success=True,
            message=f"Installed via {strategy.label}",
            notes=_notes_for(result),
        )

    fallback = _FALLBACKS.get(strategy)
    if result.get("kind") == "download_failed" and fallback is not None:
        logger.warning(
            "%s download failed (%s); falling back to %s installation",
            strategy.label, result.get("error", ""), fallback.label,
        )
        fb_result = _dispatch(fallback)(env, version)
        return InstallationOutcome(
            requested=strategy,
            channel=fallback,
            success=bool(fb_result.get("ok")),
            fallback_tried=fallback,
            message=f"Installed via {fallback.label} (fallback from {strategy.label})",
            notes=[f"{strategy.label} download failed"] + _notes_for(fb_result),
        )

    return InstallationOutcome(
        requested=strategy,
        channel=strategy,
        success=False,
        message=result.get("error", f"{strategy.label} installation failed"),
    )


def install_auto(version: str, env: EnvironmentDescriptor) -> InstallationOutcome:
    """Pick the strategy from the environment and execute it."""
    strategy = select_strategy(env)
    logger.info("Auto-selected %s installation for %s", strategy.value, env.os_id)
    return execute(strategy, version, env)
