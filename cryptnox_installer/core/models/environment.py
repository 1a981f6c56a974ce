"""
Environment model — what the installer knows about the host.

Produced once per invocation by the environment prober and never
mutated afterwards.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

PackageManager = Literal["apt", "dnf", "yum", "pacman", "zypper", "unknown"]


class EnvironmentDescriptor(BaseModel):
    """Immutable snapshot of the host's identity and capabilities.

    ``architecture`` is ``amd64`` or ``arm64`` when recognised, otherwise
    the raw machine string (e.g. ``armv7l``).
    """

    model_config = ConfigDict(frozen=True)

    os_id: str = "unknown"
    os_version_id: str = ""
    os_pretty_name: str = "unknown"
    architecture: str = "other"
    package_manager: PackageManager = "unknown"
    snap_available: bool = False
    can_elevate: bool = False
    is_root: bool = False

    @property
    def sudo_prefix(self) -> list[str]:
        """Command prefix for privileged calls (empty when already root)."""
        return [] if self.is_root else ["sudo"]
