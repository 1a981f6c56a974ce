"""
L5 Orchestration — top-level coordinators.
"""

from cryptnox_installer.core.services.installer.orchestration.lifecycle import (  # noqa: F401
    latest_version,
    status,
    uninstall,
    update,
    versions,
)
from cryptnox_installer.core.services.installer.orchestration.orchestrator import (  # noqa: F401
    execute,
    install_auto,
)
