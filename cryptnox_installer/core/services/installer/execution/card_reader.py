"""
L4 Execution — Card reader setup.

The kernel's NFC stack claims PN533-based readers before pcscd can;
blacklisting those modules hands the reader to PC/SC.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.services.installer.errors import InstallerError
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.execution.system_deps import (
    require_elevation,
)

logger = logging.getLogger(__name__)


def blacklist_content(modules: list[str] | None = None) -> str:
    modules = modules if modules is not None else get_config().nfc_blacklist_modules
    lines = ["# Blacklist NFC modules for PC/SC compatibility"]
    lines += [f"blacklist {m}" for m in modules]
    return "\n".join(lines) + "\n"


def setup_card_reader(env: EnvironmentDescriptor) -> dict[str, Any]:
    """Write the NFC module blacklist. Takes effect after a reboot.

    Written directly when root, through ``sudo tee`` otherwise.

    Returns:
        ``{"ok": True, "path": "...", "reboot_required": True}``

    Raises:
        MissingElevationTool: Not root and no sudo.
        InstallerError: The file could not be written.
    """
    require_elevation(env)
    path = Path(get_config().nfc_blacklist_path)
    content = blacklist_content()
    logger.info("Setting up card reader (%s)...", path)

    if env.is_root:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise InstallerError(f"Cannot write {path}: {e}") from e
    else:
        r = _run_subprocess(["tee", str(path)], needs_sudo=True, input_text=content, timeout=60)
        if not r["ok"]:
            raise InstallerError(f"Cannot write {path}: {r.get('stderr') or r['error']}")

    return {"ok": True, "path": str(path), "reboot_required": True}
