"""
L2 Resolver — Target version resolution.

Priority: explicit override > latest version on PyPI > hardcoded default.
Validation guards the override and the network value; the configured
default is trusted.
"""

from __future__ import annotations

import json
import logging
import urllib.request

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.services.installer.data.constants import VERSION_PATTERN
from cryptnox_installer.core.services.installer.errors import InvalidVersionFormat

logger = logging.getLogger(__name__)

_USER_AGENT = "cryptnox-installer/1.0"


def validate_version(version: str) -> str:
    """Return ``version`` unchanged if it matches ``X.Y.Z[-suffix]``.

    Raises:
        InvalidVersionFormat: On any other shape (``1.0``, ``v1.0.3``,
            ``1.0.3.4``, ...).
    """
    if not VERSION_PATTERN.match(version):
        raise InvalidVersionFormat(version)
    return version


def fetch_latest_version(timeout: int | None = None) -> str:
    """Latest release of the package on PyPI, or ``""`` on any failure.

    Best-effort: network errors, timeouts and malformed JSON are logged
    and swallowed.
    """
    cfg = get_config()
    url = cfg.pypi_json_url.format(package=cfg.package_name)
    try:
        req = urllib.request.Request(
            url,
            headers={"Accept": "application/json", "User-Agent": _USER_AGENT},
        )
        with urllib.request.urlopen(req, timeout=timeout or cfg.network_timeout) as resp:
            data = json.loads(resp.read())
    except Exception as exc:
        logger.debug("PyPI lookup failed (%s): %s", url, exc)
        return ""

    if not isinstance(data, dict):
        return ""
    info = data.get("info") or {}
    version = info.get("version", "") if isinstance(info, dict) else ""
    return version.strip() if isinstance(version, str) else ""


def resolve_version(override: str | None = None, *, offline: bool = False) -> str:
    """Resolve the version to install.

    Args:
        override: Explicit version (e.g. from ``CRYPTNOX_VERSION``).
            Wins unconditionally when non-empty.
        offline: Skip the PyPI lookup.

    Returns:
        A validated version string.

    Raises:
        InvalidVersionFormat: If the override or PyPI value is malformed.
    """
    if override:
        logger.debug("Using version override %s", override)
        return validate_version(override.strip())

    if not offline:
        latest = fetch_latest_version()
        if latest:
            logger.debug("Latest version on PyPI: %s", latest)
            return validate_version(latest)

    default = get_config().default_version
    logger.debug("Using default version %s", default)
    return default
