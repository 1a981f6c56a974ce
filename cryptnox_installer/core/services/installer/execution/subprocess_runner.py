"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for install
operations. Logging, sudo prefixing and error capture are centralised
here. Never raises: every outcome is a result dict.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

_TAIL = 2000


def _is_root() -> bool:
    return os.geteuid() == 0


def _run_subprocess(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = 600,
    input_text: str | None = None,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
) -> dict[str, Any]:
    """Run a command, prefixing ``sudo`` when root is needed.

    Sudo runs interactively (no ``-S``): the user types the password on
    the terminal if one is required.  Callers check for ``sudo`` up front
    with ``require_elevation()``.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before ``TimeoutExpired``.
        input_text: Text piped to the command's stdin.
        env_overrides: Extra env vars.
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    if needs_sudo and not _is_root():
        cmd = ["sudo"] + cmd

    env = None
    if env_overrides:
        env = os.environ.copy()
        env.update(env_overrides)

    logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input_text,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout, cmd[0])
        return {"ok": False, "error": f"Command timed out ({timeout}s)", "timeout": True}
    except FileNotFoundError:
        return {"ok": False, "error": f"Command not found: {cmd[0]}", "missing": True}
    except OSError as e:
        logger.exception("Subprocess error: %s", cmd)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-_TAIL:] if result.stdout else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    stderr = result.stderr[-_TAIL:] if result.stderr else ""
    logger.debug("Command failed (exit %d): %s\n%s", result.returncode, cmd, stderr)
    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "returncode": result.returncode,
        "stderr": stderr,
        "stdout": stdout,
        "elapsed_ms": elapsed_ms,
    }
