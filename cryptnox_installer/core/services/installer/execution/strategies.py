"""
L4 Execution — Installation strategies.

One function per channel. Each runs a fixed sequence of external calls
(dependencies → fetch → verify → install → post-install) and returns a
result dict. Fatal failures raise ``InstallerError`` subclasses; the
``.deb`` download failure is returned as ``kind="download_failed"`` so
the orchestrator can fall back.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.services.installer.data.constants import SCRATCH_PREFIX
from cryptnox_installer.core.services.installer.errors import (
    CannotBootstrapSnap,
    InstallerError,
    PackageInstallFailed,
    WrongPackageManager,
)
from cryptnox_installer.core.services.installer.execution.download import (
    download_file,
    expected_digest,
    fetch_text,
    verify_checksum,
)
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.execution.system_deps import (
    install_system_deps,
    require_elevation,
)
from cryptnox_installer.core.services.installer.resolver.command_building import (
    deb_artifact_name,
    pip_install_variants,
)

logger = logging.getLogger(__name__)

# Commands that install snapd, per package manager. The "best_effort"
# commands may fail without aborting the bootstrap.
_SNAPD_BOOTSTRAP: dict[str, dict[str, list[list[str]]]] = {
    "apt": {
        "required": [["apt-get", "update"], ["apt-get", "install", "-y", "snapd"]],
        "best_effort": [],
    },
    "dnf": {
        "required": [
            ["dnf", "install", "-y", "snapd"],
            ["systemctl", "enable", "--now", "snapd.socket"],
        ],
        "best_effort": [["ln", "-sf", "/var/lib/snapd/snap", "/snap"]],
    },
    "yum": {
        "required": [
            ["yum", "install", "-y", "snapd"],
            ["systemctl", "enable", "--now", "snapd.socket"],
        ],
        "best_effort": [["ln", "-sf", "/var/lib/snapd/snap", "/snap"]],
    },
}


# ── Snap ──────────────────────────────────────────────────────


def _bootstrap_snapd(env: EnvironmentDescriptor) -> None:
    """Install snapd with the system package manager.

    Raises:
        CannotBootstrapSnap: No recipe for this package manager.
        InstallerError: A required bootstrap command failed.
    """
    recipe = _SNAPD_BOOTSTRAP.get(env.package_manager)
    if recipe is None:
        raise CannotBootstrapSnap(env.package_manager)

    logger.info("Installing snapd...")
    timeout = get_config().command_timeout
    for cmd in recipe["required"]:
        r = _run_subprocess(cmd, needs_sudo=True, timeout=timeout)
        if not r["ok"]:
            raise InstallerError(
                f"snapd installation failed at '{' '.join(cmd)}': "
                f"{r.get('stderr') or r['error']}"
            )
    for cmd in recipe["best_effort"]:
        r = _run_subprocess(cmd, needs_sudo=True, timeout=60)
        if not r["ok"]:
            logger.debug("Optional snapd step failed: %s", " ".join(cmd))


def connect_snap_interfaces(snap_name: str | None = None) -> dict[str, bool]:
    """Grant the device-access interfaces. Best-effort.

    The snap still runs without card-reader access, so failures are
    logged and reported, never raised.
    """
    cfg = get_config()
    snap_name = snap_name or cfg.snap_name
    granted: dict[str, bool] = {}
    for iface in cfg.snap_interfaces:
        r = _run_subprocess(
            ["snap", "connect", f"{snap_name}:{iface}"],
            needs_sudo=True, timeout=60,
        )
        granted[iface] = r["ok"]
        if not r["ok"]:
            logger.warning(
                "Could not connect %s:%s (%s)", snap_name, iface,
                r.get("stderr") or r["error"],
            )
    return granted


def install_snap(env: EnvironmentDescriptor) -> dict[str, Any]:
    """Install from the Snap Store, bootstrapping snapd if needed.

    Returns:
        ``{"ok": True, "interfaces": {"raw-usb": True, ...}}``

    Raises:
        MissingElevationTool, CannotBootstrapSnap, InstallerError.
    """
    require_elevation(env)
    cfg = get_config()
    logger.info("Installing via Snap...")

    if not env.snap_available:
        _bootstrap_snapd(env)

    r = _run_subprocess(
        ["snap", "install", cfg.snap_name],
        needs_sudo=True, timeout=cfg.command_timeout,
    )
    if not r["ok"]:
        raise InstallerError(
            f"snap install {cfg.snap_name} failed: {r.get('stderr') or r['error']}"
        )

    logger.info("Connecting interfaces...")
    interfaces = connect_snap_interfaces(cfg.snap_name)
    return {"ok": True, "interfaces": interfaces, "run_as": f"{cfg.snap_name}.card"}


# ── Debian package ───────────────────────────────────────────


def install_python_extras(packages: list[str] | None = None) -> bool:
    """pip-install Python deps the .deb does not bundle. Best-effort."""
    packages = packages if packages is not None else list(get_config().python_deps)
    if not packages:
        return True
    logger.info("Installing Python dependencies via pip...")
    for cmd in pip_install_variants(packages):
        if _run_subprocess(cmd, timeout=get_config().command_timeout)["ok"]:
            return True
    logger.warning("Some pip dependencies may not have installed: %s", ", ".join(packages))
    return False


def install_deb(
    env: EnvironmentDescriptor,
    version: str,
    *,
    scratch_dir: Path | None = None,
) -> dict[str, Any]:
    """Install the prebuilt ``.deb`` from the release host.

    Returns:
        ``{"ok": True, "artifact": "...", "checksum": "verified"|"skipped"}``
        or ``{"ok": False, "kind": "download_failed", ...}`` when the
        artifact cannot be downloaded.

    Raises:
        WrongPackageManager: Host is not apt-based.
        ChecksumMismatch: Artifact does not match ``SHA256SUMS``.
        InstallerError: dpkg and the apt repair both failed.
    """
    if env.package_manager != "apt":
        raise WrongPackageManager("apt", env.package_manager)

    require_elevation(env)
    logger.info("Installing via Deb package...")
    install_system_deps(env)

    cfg = get_config()
    artifact = deb_artifact_name(cfg.package_name, version, env)
    base_url = cfg.release_base_url.format(version=version)

    if scratch_dir is not None:
        return _install_deb_artifact(env, artifact, base_url, scratch_dir)

    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as tmp:
        return _install_deb_artifact(env, artifact, base_url, Path(tmp))


def _install_deb_artifact(
    env: EnvironmentDescriptor,
    artifact: str,
    base_url: str,
    scratch: Path,
) -> dict[str, Any]:
    cfg = get_config()
    deb_path = scratch / artifact

    dl = download_file(f"{base_url}/{artifact}", deb_path)
    if not dl["ok"]:
        logger.error("Failed to download deb package %s", artifact)
        return {"ok": False, "kind": "download_failed", "error": dl["error"], "artifact": artifact}

    checksum = "skipped"
    manifest = fetch_text(f"{base_url}/{cfg.checksum_file}")
    if manifest is None:
        logger.warning("Checksum file not available, skipping verification")
    else:
        record = verify_checksum(deb_path, expected_digest(manifest, artifact))
        checksum = "skipped" if record.skipped else "verified"

    try:
        timeout = cfg.command_timeout
        r = _run_subprocess(["dpkg", "-i", str(deb_path)], needs_sudo=True, timeout=timeout)
        if not r["ok"]:
            logger.info("dpkg reported missing dependencies, repairing with apt-get -f")
            fix = _run_subprocess(
                ["apt-get", "install", "-f", "-y"], needs_sudo=True, timeout=timeout,
            )
            if not fix["ok"]:
                raise InstallerError(
                    f"dpkg -i {artifact} failed: {fix.get('stderr') or fix['error']}"
                )
    finally:
        deb_path.unlink(missing_ok=True)

    extras_ok = install_python_extras()
    return {
        "ok": True,
        "artifact": artifact,
        "checksum": checksum,
        "python_extras": extras_ok,
    }


# ── pip (RPM fallback and native) ────────────────────────────


def _local_bin_on_path() -> bool:
    local_bin = os.path.expanduser("~/.local/bin")
    return local_bin in os.environ.get("PATH", "").split(os.pathsep)


def install_pip(env: EnvironmentDescriptor) -> dict[str, Any]:
    """Install system deps, then cryptnox-cli with ``pip install --user``.

    The ``--break-system-packages`` variant goes first; first success wins.

    Returns:
        ``{"ok": True, "command": [...], "path_hint": bool}``

    Raises:
        PackageInstallFailed: Both pip variants failed.
    """
    logger.info("Installing via pip (native method)...")
    install_system_deps(env)

    cfg = get_config()
    last: dict[str, Any] = {}
    for cmd in pip_install_variants([cfg.package_name]):
        last = _run_subprocess(cmd, timeout=cfg.command_timeout)
        if last["ok"]:
            path_hint = not _local_bin_on_path()
            if path_hint:
                logger.warning("~/.local/bin is not on PATH")
            return {"ok": True, "command": cmd, "path_hint": path_hint}

    raise PackageInstallFailed(cfg.package_name, last.get("stderr") or last.get("error", ""))
