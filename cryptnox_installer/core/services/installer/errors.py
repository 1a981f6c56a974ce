"""
Installer errors — the fatal failure taxonomy.

Subprocess wrappers never raise; they return ``{"ok": False, ...}`` dicts.
These exceptions are for failures that must abort the whole operation.
The CLI catches ``InstallerError``, prints the message and exits 1.

Recoverable outcomes (a failed ``.deb`` download, an unknown package
manager) are NOT exceptions; they are result kinds the caller branches on.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for every fatal installer failure."""


class InvalidVersionFormat(InstallerError):
    """A user- or network-supplied version does not match ``X.Y.Z[-suffix]``."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Invalid version format: {version} (expected X.Y.Z)")


class MissingElevationTool(InstallerError):
    """Root privileges are needed but ``sudo`` is not installed."""

    def __init__(self) -> None:
        super().__init__(
            "sudo is required but not installed. "
            "Please run as root or install sudo."
        )


class CannotBootstrapSnap(InstallerError):
    """``snap`` is missing and cannot be installed with this package manager."""

    def __init__(self, package_manager: str):
        self.package_manager = package_manager
        super().__init__(
            f"Cannot install snapd automatically (package manager: {package_manager})"
        )


class WrongPackageManager(InstallerError):
    """The requested strategy needs a package manager this host lacks."""

    def __init__(self, required: str, found: str):
        self.required = required
        self.found = found
        super().__init__(
            f"Deb installation requires {required} (found: {found})"
        )


class ChecksumMismatch(InstallerError):
    """A downloaded artifact does not match its published sha256."""

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {filename}: "
            f"expected {expected}, got {actual}"
        )


class PackageInstallFailed(InstallerError):
    """Every install variant for a package failed."""

    def __init__(self, package: str, detail: str = ""):
        self.package = package
        self.detail = detail
        msg = f"pip install of {package} failed"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class BuildError(InstallerError):
    """Building the Debian package failed."""
