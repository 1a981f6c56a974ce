"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
Subprocess calls, file reads, env var reads — all read-only.
"""

from cryptnox_installer.core.services.installer.detection.channels import (  # noqa: F401
    CHANNEL_PRIORITY,
    channel_version,
    deb_version,
    detect_active_channel,
    get_installed_versions,
    pip_version,
    rpm_version,
    snap_version,
)
from cryptnox_installer.core.services.installer.detection.environment import (  # noqa: F401
    detect_package_manager,
    normalize_arch,
    probe,
)
from cryptnox_installer.core.services.installer.detection.service_status import (  # noqa: F401
    _detect_init_system,
    get_service_status,
    get_snap_interfaces,
    scan_card_readers,
)
