"""
Tests for core models — environment, outcomes, reports, config.
"""

import pytest
from pydantic import ValidationError

from cryptnox_installer.core.models import (
    ChecksumRecord,
    EnvironmentDescriptor,
    InstallationOutcome,
    InstallationStrategy,
    InstallerConfig,
    SystemStatusReport,
    UninstallReport,
)


class TestEnvironmentDescriptor:
    def test_defaults(self):
        env = EnvironmentDescriptor()
        assert env.os_id == "unknown"
        assert env.package_manager == "unknown"
        assert env.can_elevate is False

    def test_frozen(self):
        env = EnvironmentDescriptor(os_id="ubuntu")
        with pytest.raises(ValidationError):
            env.os_id = "debian"

    def test_rejects_unknown_package_manager(self):
        with pytest.raises(ValidationError):
            EnvironmentDescriptor(package_manager="brew")

    def test_sudo_prefix(self):
        assert EnvironmentDescriptor(is_root=True).sudo_prefix == []
        assert EnvironmentDescriptor().sudo_prefix == ["sudo"]


class TestInstallationStrategy:
    def test_labels(self):
        assert [s.label for s in InstallationStrategy] == ["Snap", "Deb", "RPM", "Pip"]

    def test_from_value(self):
        assert InstallationStrategy("native") is InstallationStrategy.NATIVE


class TestChecksumRecord:
    def test_skipped(self):
        record = ChecksumRecord(filename="a.deb")
        assert record.skipped and record.matches

    def test_mismatch(self):
        record = ChecksumRecord(filename="a.deb", expected_hex="aa", actual_hex="bb")
        assert not record.matches


class TestOutcomes:
    def test_outcome_to_dict(self):
        outcome = InstallationOutcome(
            requested=InstallationStrategy.DEB,
            channel=InstallationStrategy.NATIVE,
            fallback_tried=InstallationStrategy.NATIVE,
        )
        d = outcome.to_dict()
        assert d["requested"] == "deb"
        assert d["channel"] == "native"
        assert d["fallback_tried"] == "native"
        assert d["success"] is True

    def test_uninstall_report(self):
        report = UninstallReport()
        assert report.nothing_found
        report.removed.add(InstallationStrategy.SNAP)
        assert not report.nothing_found
        assert report.to_dict() == {"removed": ["snap"], "failed": []}

    def test_status_report_defaults(self):
        d = SystemStatusReport().to_dict()
        assert d["versions"] == {}
        assert d["reader_scan"] == "skipped"


class TestInstallerConfig:
    def test_defaults(self):
        cfg = InstallerConfig()
        assert cfg.snap_interfaces == ["raw-usb", "hardware-observe"]
        assert cfg.service_name == "pcscd"
        assert cfg.reader_scan_timeout == 5

    def test_extra_forbidden(self):
        with pytest.raises(ValidationError):
            InstallerConfig(unknown=True)
