"""
Installer configuration model.

Every field has a working default, so running without a config file
installs the upstream cryptnox-cli from the public channels.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InstallerConfig(BaseModel):
    """Tunables loaded from ``cryptnox-installer.yml``."""

    model_config = ConfigDict(extra="forbid")

    package_name: str = "cryptnox-cli"
    snap_name: str = "cryptnox"
    cli_command: str = "cryptnox"
    default_version: str = "1.0.3"

    pypi_json_url: str = "https://pypi.org/pypi/{package}/json"
    pypi_version_json_url: str = "https://pypi.org/pypi/{package}/{version}/json"
    pypi_sdist_url: str = (
        "https://files.pythonhosted.org/packages/source/{initial}/{project}/{filename}"
    )
    release_base_url: str = (
        "https://github.com/cryptnox-snap/cryptnox-installer/releases/download/v{version}"
    )
    checksum_file: str = "SHA256SUMS"

    # Python deps the .deb does not bundle.
    python_deps: list[str] = Field(
        default_factory=lambda: ["cryptnox-sdk-py", "lazy-import", "tabulate"]
    )
    snap_interfaces: list[str] = Field(
        default_factory=lambda: ["raw-usb", "hardware-observe"]
    )

    service_name: str = "pcscd"
    nfc_blacklist_path: str = "/etc/modprobe.d/blacklist-nfc.conf"
    nfc_blacklist_modules: list[str] = Field(
        default_factory=lambda: ["nfc", "pn533", "pn533_usb"]
    )

    # Seconds.
    command_timeout: int = 600
    probe_timeout: int = 10
    network_timeout: int = 15
    reader_scan_timeout: int = 5
