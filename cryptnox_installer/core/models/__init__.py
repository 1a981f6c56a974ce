"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from cryptnox_installer.core.models import EnvironmentDescriptor, InstallationStrategy
"""

from cryptnox_installer.core.models.config import InstallerConfig
from cryptnox_installer.core.models.environment import EnvironmentDescriptor, PackageManager
from cryptnox_installer.core.models.outcome import (
    ChecksumRecord,
    InstallationOutcome,
    InstallationStrategy,
    SystemStatusReport,
    UninstallReport,
)

__all__ = [
    # outcome.py
    "ChecksumRecord",
    # environment.py
    "EnvironmentDescriptor",
    "InstallationOutcome",
    "InstallationStrategy",
    # config.py
    "InstallerConfig",
    "PackageManager",
    "SystemStatusReport",
    "UninstallReport",
]
