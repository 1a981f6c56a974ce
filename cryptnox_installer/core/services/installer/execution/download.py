"""
L4 Execution — Download and checksum verification.

File download support and sha256 integrity checking for release
artifacts.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import urllib.request
from pathlib import Path
from typing import Any

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.outcome import ChecksumRecord
from cryptnox_installer.core.services.installer.errors import ChecksumMismatch

logger = logging.getLogger(__name__)

_USER_AGENT = "cryptnox-installer/1.0"


def download_file(url: str, dest: Path, *, timeout: int | None = None) -> dict[str, Any]:
    """Download ``url`` to ``dest``.

    Never raises. A failed download leaves no partial file behind.

    Returns:
        ``{"ok": True, "path": "...", "size_bytes": N}`` or
        ``{"ok": False, "kind": "download_failed", "error": "..."}``.
    """
    timeout = timeout or get_config().network_timeout
    logger.info("Downloading %s", url)
    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as out:
            shutil.copyfileobj(resp, out)
    except Exception as exc:
        dest.unlink(missing_ok=True)
        logger.debug("Download of %s failed: %s", url, exc)
        return {"ok": False, "kind": "download_failed", "error": str(exc)[:200], "url": url}

    return {"ok": True, "path": str(dest), "size_bytes": dest.stat().st_size}


def fetch_text(url: str, *, timeout: int | None = None) -> str | None:
    """GET a small text resource; None when unreachable."""
    timeout = timeout or get_config().network_timeout
    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read().decode("utf-8", errors="replace")
    except Exception as exc:
        logger.debug("Fetch of %s failed: %s", url, exc)
        return None


def sha256_file(path: Path) -> str:
    """Hex sha256 digest of a file, read in chunks."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def expected_digest(manifest: str, filename: str) -> str | None:
    """Look up ``filename`` in a ``sha256sum``-style manifest.

    Lines look like ``<hex>  <name>`` or ``<hex> *<name>`` (binary mode).
    """
    for line in manifest.splitlines():
        parts = line.strip().split()
        if len(parts) < 2:
            continue
        name = parts[-1].lstrip("*")
        if name == filename:
            return parts[0].lower()
    return None


def verify_checksum(path: Path, expected: str | None) -> ChecksumRecord:
    """Verify a downloaded artifact against its expected sha256.

    An absent ``expected`` skips verification (``record.skipped`` is
    True) and logs a warning.

    Raises:
        ChecksumMismatch: On mismatch. The artifact is deleted first.
    """
    record = ChecksumRecord(
        filename=path.name,
        expected_hex=expected.lower() if expected else None,
    )
    if record.skipped:
        logger.warning("No checksum provided for %s, skipping verification", path.name)
        return record

    record = record.model_copy(update={"actual_hex": sha256_file(path)})
    if not record.matches:
        path.unlink(missing_ok=True)
        raise ChecksumMismatch(path.name, record.expected_hex or "", record.actual_hex)

    logger.info("Checksum verified for %s", path.name)
    return record
