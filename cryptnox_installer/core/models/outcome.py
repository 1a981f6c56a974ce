"""
Installation models — strategies, outcomes and reports.

These are transient: they exist to decide the final message and exit
code. What is actually installed lives in the package managers' own
databases and is queried live.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class InstallationStrategy(str, Enum):
    """One of the mutually exclusive installation channels."""

    SNAP = "snap"
    DEB = "deb"
    RPM = "rpm"
    NATIVE = "native"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    InstallationStrategy.SNAP: "Snap",
    InstallationStrategy.DEB: "Deb",
    InstallationStrategy.RPM: "RPM",
    InstallationStrategy.NATIVE: "Pip",
}


class ChecksumRecord(BaseModel):
    """sha256 verification result for one downloaded artifact."""

    filename: str
    expected_hex: str | None = None
    actual_hex: str = ""

    @property
    def skipped(self) -> bool:
        """No published digest — verification was a no-op."""
        return not self.expected_hex

    @property
    def matches(self) -> bool:
        return self.skipped or self.expected_hex == self.actual_hex


class InstallationOutcome(BaseModel):
    """Result of running one strategy, including any automatic fallback.

    ``channel`` is the strategy that actually ran; ``requested`` is what
    the caller asked for. They differ only after a fallback.
    """

    requested: InstallationStrategy
    channel: InstallationStrategy
    success: bool = True
    fallback_tried: InstallationStrategy | None = None
    message: str = ""
    notes: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "requested": self.requested.value,
            "channel": self.channel.value,
            "success": self.success,
            "fallback_tried": self.fallback_tried.value if self.fallback_tried else None,
            "message": self.message,
            "notes": list(self.notes),
        }


class UninstallReport(BaseModel):
    """Which channels an uninstall actually removed."""

    removed: set[InstallationStrategy] = Field(default_factory=set)
    failed: set[InstallationStrategy] = Field(default_factory=set)

    @property
    def nothing_found(self) -> bool:
        return not self.removed and not self.failed

    def to_dict(self) -> dict:
        return {
            "removed": sorted(s.value for s in self.removed),
            "failed": sorted(s.value for s in self.failed),
        }


class SystemStatusReport(BaseModel):
    """Composite view: middleware daemon, installed versions, snap grants."""

    service: dict = Field(default_factory=dict)
    versions: dict[InstallationStrategy, str] = Field(default_factory=dict)
    latest: str | None = None
    snap_interfaces: list[str] = Field(default_factory=list)
    readers: list[str] = Field(default_factory=list)
    reader_scan: str = "skipped"

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "service": dict(self.service),
            "versions": {k.value: v for k, v in self.versions.items()},
            "latest": self.latest,
            "snap_interfaces": list(self.snap_interfaces),
            "readers": list(self.readers),
            "reader_scan": self.reader_scan,
        }
