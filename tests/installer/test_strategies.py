"""
Installer execution — per-channel strategies and system dependencies.

Every external command goes through ``_run_subprocess``, patched at
its use site.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from unittest.mock import call, patch

import pytest

from cryptnox_installer.core.services.installer.errors import (
    CannotBootstrapSnap,
    ChecksumMismatch,
    InstallerError,
    MissingElevationTool,
    PackageInstallFailed,
    WrongPackageManager,
)
from cryptnox_installer.core.services.installer.execution import strategies, system_deps
from tests.installer.simulated_profiles import make_env

_STRAT = "cryptnox_installer.core.services.installer.execution.strategies"
_DEPS = "cryptnox_installer.core.services.installer.execution.system_deps"

_OK = {"ok": True, "stdout": ""}
_FAIL = {"ok": False, "error": "Command failed (exit 1)", "stderr": "boom"}


def _cmds(mock_run) -> list[list[str]]:
    return [c.args[0] for c in mock_run.call_args_list]


# ── System dependencies ───────────────────────────────────────


class TestRequireElevation:
    def test_no_sudo(self) -> None:
        with pytest.raises(MissingElevationTool):
            system_deps.require_elevation(make_env(sudo=False))

    def test_root_without_sudo(self) -> None:
        system_deps.require_elevation(make_env(sudo=False, root=True))

    def test_sudo(self) -> None:
        system_deps.require_elevation(make_env(sudo=True))


class TestInstallSystemDeps:
    @patch(f"{_DEPS}.enable_service", return_value=True)
    @patch(f"{_DEPS}._run_subprocess", return_value=_OK)
    def test_apt_refreshes_first(self, mock_run, mock_enable) -> None:
        result = system_deps.install_system_deps(make_env(pm="apt"))

        cmds = _cmds(mock_run)
        assert cmds[0] == ["apt-get", "update"]
        assert cmds[1][:3] == ["apt-get", "install", "-y"]
        assert "pcscd" in cmds[1]
        assert result["ok"] is True
        mock_enable.assert_called_once()

    @patch(f"{_DEPS}.enable_service", return_value=True)
    @patch(f"{_DEPS}._run_subprocess", return_value=_OK)
    def test_pacman_full_sync(self, mock_run, _enable) -> None:
        system_deps.install_system_deps(make_env(os_id="arch", pm="pacman"))
        (cmd,) = _cmds(mock_run)
        assert cmd[:3] == ["pacman", "-Syu", "--noconfirm"]
        assert "pcsclite" in cmd

    @patch(f"{_DEPS}.enable_service", return_value=True)
    @patch(f"{_DEPS}._run_subprocess", return_value=_OK)
    def test_yum_uses_rpm_names(self, mock_run, _enable) -> None:
        system_deps.install_system_deps(make_env(os_id="centos", pm="yum"))
        (cmd,) = _cmds(mock_run)
        assert cmd[:3] == ["yum", "install", "-y"]
        assert "pcsc-lite" in cmd

    @patch(f"{_DEPS}._run_subprocess")
    def test_unknown_pm_is_a_warning(self, mock_run, caplog) -> None:
        result = system_deps.install_system_deps(make_env(os_id="alpine", pm="unknown"))

        assert result == {
            "ok": True,
            "skipped": True,
            "warning": "Unknown package manager. Install pcscd manually.",
        }
        mock_run.assert_not_called()
        assert "Install pcscd manually" in caplog.text

    @patch(f"{_DEPS}._run_subprocess", side_effect=[_OK, _FAIL])
    def test_install_failure_raises(self, _run) -> None:
        with pytest.raises(InstallerError, match="System dependency installation failed"):
            system_deps.install_system_deps(make_env(pm="apt"))

    @patch(f"{_DEPS}.shutil.which", return_value="/usr/bin/systemctl")
    @patch(f"{_DEPS}._run_subprocess", return_value=_OK)
    def test_enable_service(self, mock_run, _which) -> None:
        assert system_deps.enable_service(make_env()) is True
        assert _cmds(mock_run) == [
            ["systemctl", "enable", "pcscd"],
            ["systemctl", "start", "pcscd"],
        ]

    @patch(f"{_DEPS}.shutil.which", return_value=None)
    @patch(f"{_DEPS}._run_subprocess")
    def test_enable_service_without_systemd(self, mock_run, _which) -> None:
        assert system_deps.enable_service(make_env()) is False
        mock_run.assert_not_called()


# ── Snap ──────────────────────────────────────────────────────


class TestInstallSnap:
    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_snap_present(self, mock_run) -> None:
        result = strategies.install_snap(make_env(snap=True))

        assert _cmds(mock_run) == [
            ["snap", "install", "cryptnox"],
            ["snap", "connect", "cryptnox:raw-usb"],
            ["snap", "connect", "cryptnox:hardware-observe"],
        ]
        assert result["interfaces"] == {"raw-usb": True, "hardware-observe": True}

    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_bootstraps_snapd_on_apt(self, mock_run) -> None:
        strategies.install_snap(make_env(snap=False))
        cmds = _cmds(mock_run)
        assert cmds[:3] == [
            ["apt-get", "update"],
            ["apt-get", "install", "-y", "snapd"],
            ["snap", "install", "cryptnox"],
        ]

    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_bootstraps_snapd_on_dnf(self, mock_run) -> None:
        strategies.install_snap(make_env(os_id="fedora", pm="dnf"))
        cmds = _cmds(mock_run)
        assert ["systemctl", "enable", "--now", "snapd.socket"] in cmds
        assert ["ln", "-sf", "/var/lib/snapd/snap", "/snap"] in cmds

    def test_cannot_bootstrap_on_pacman(self) -> None:
        with pytest.raises(CannotBootstrapSnap):
            strategies.install_snap(make_env(os_id="arch", pm="pacman"))

    def test_needs_elevation(self) -> None:
        with pytest.raises(MissingElevationTool):
            strategies.install_snap(make_env(snap=True, sudo=False))

    @patch(f"{_STRAT}._run_subprocess")
    def test_interface_failure_is_not_fatal(self, mock_run) -> None:
        mock_run.side_effect = [_OK, _FAIL, _OK]
        result = strategies.install_snap(make_env(snap=True))
        assert result["ok"] is True
        assert result["interfaces"] == {"raw-usb": False, "hardware-observe": True}

    @patch(f"{_STRAT}._run_subprocess", return_value=_FAIL)
    def test_snap_install_failure(self, _run) -> None:
        with pytest.raises(InstallerError, match="snap install cryptnox failed"):
            strategies.install_snap(make_env(snap=True))


# ── Debian package ────────────────────────────────────────────


def _download_writing(content: bytes):
    def fake(url: str, dest: Path, **_kw):
        dest.write_bytes(content)
        return {"ok": True, "path": str(dest), "size_bytes": len(content)}
    return fake


_ARTIFACT = "cryptnox-cli_1.0.3-1_amd64_ubuntu-22.04.deb"


@patch(f"{_STRAT}.install_system_deps", return_value={"ok": True})
class TestInstallDeb:
    def test_wrong_package_manager(self, _deps) -> None:
        with pytest.raises(WrongPackageManager) as exc:
            strategies.install_deb(make_env(os_id="fedora", pm="dnf"), "1.0.3")
        assert exc.value.found == "dnf"

    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    @patch(f"{_STRAT}.fetch_text")
    @patch(f"{_STRAT}.download_file")
    def test_verified_install(self, mock_dl, mock_fetch, mock_run, _deps, tmp_path: Path) -> None:
        mock_dl.side_effect = _download_writing(b"deb")
        mock_fetch.return_value = f"{hashlib.sha256(b'deb').hexdigest()}  {_ARTIFACT}\n"

        result = strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert result["ok"] is True
        assert result["checksum"] == "verified"
        assert result["artifact"] == _ARTIFACT
        url = mock_dl.call_args.args[0]
        assert url.endswith(f"/v1.0.3/{_ARTIFACT}")
        assert ["dpkg", "-i", str(tmp_path / _ARTIFACT)] in _cmds(mock_run)
        assert not (tmp_path / _ARTIFACT).exists()

    @patch(f"{_STRAT}._run_subprocess")
    @patch(f"{_STRAT}.fetch_text")
    @patch(f"{_STRAT}.download_file", return_value={
        "ok": False, "kind": "download_failed", "error": "HTTP Error 404: Not Found",
    })
    def test_download_failure_is_a_result(self, _dl, mock_fetch, mock_run, _deps, tmp_path) -> None:
        result = strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert result["ok"] is False
        assert result["kind"] == "download_failed"
        mock_fetch.assert_not_called()
        mock_run.assert_not_called()

    @patch(f"{_STRAT}._run_subprocess")
    @patch(f"{_STRAT}.fetch_text", return_value=f"{'0' * 64}  {_ARTIFACT}\n")
    @patch(f"{_STRAT}.download_file")
    def test_checksum_mismatch_aborts(self, mock_dl, _fetch, mock_run, _deps, tmp_path) -> None:
        mock_dl.side_effect = _download_writing(b"tampered")

        with pytest.raises(ChecksumMismatch):
            strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        mock_run.assert_not_called()
        assert not (tmp_path / _ARTIFACT).exists()

    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    @patch(f"{_STRAT}.fetch_text", return_value=None)
    @patch(f"{_STRAT}.download_file")
    def test_missing_manifest_skips(self, mock_dl, _fetch, _run, _deps, tmp_path, caplog) -> None:
        mock_dl.side_effect = _download_writing(b"deb")

        result = strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert result["checksum"] == "skipped"
        assert "Checksum file not available" in caplog.text

    @patch(f"{_STRAT}._run_subprocess")
    @patch(f"{_STRAT}.fetch_text", return_value=None)
    @patch(f"{_STRAT}.download_file")
    def test_dpkg_failure_repaired(self, mock_dl, _fetch, mock_run, _deps, tmp_path) -> None:
        mock_dl.side_effect = _download_writing(b"deb")
        mock_run.side_effect = lambda cmd, **kw: _FAIL if cmd[0] == "dpkg" else _OK

        result = strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert result["ok"] is True
        assert ["apt-get", "install", "-f", "-y"] in _cmds(mock_run)

    @patch(f"{_STRAT}._run_subprocess", return_value=_FAIL)
    @patch(f"{_STRAT}.fetch_text", return_value=None)
    @patch(f"{_STRAT}.download_file")
    def test_dpkg_and_repair_fail(self, mock_dl, _fetch, _run, _deps, tmp_path) -> None:
        mock_dl.side_effect = _download_writing(b"deb")

        with pytest.raises(InstallerError, match="dpkg -i"):
            strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert not (tmp_path / _ARTIFACT).exists()

    @patch(f"{_STRAT}._run_subprocess")
    @patch(f"{_STRAT}.fetch_text", return_value=None)
    @patch(f"{_STRAT}.download_file")
    def test_python_extras_are_best_effort(self, mock_dl, _fetch, mock_run, _deps, tmp_path) -> None:
        mock_dl.side_effect = _download_writing(b"deb")
        mock_run.side_effect = lambda cmd, **kw: _FAIL if "pip" in cmd else _OK

        result = strategies.install_deb(make_env(), "1.0.3", scratch_dir=tmp_path)

        assert result["ok"] is True
        assert result["python_extras"] is False


# ── pip ───────────────────────────────────────────────────────


@patch(f"{_STRAT}.install_system_deps", return_value={"ok": True})
class TestInstallPip:
    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_first_variant(self, mock_run, _deps, monkeypatch) -> None:
        monkeypatch.setenv("PATH", "/usr/bin")
        result = strategies.install_pip(make_env(os_id="arch", pm="pacman"))

        (cmd,) = _cmds(mock_run)
        assert "--break-system-packages" in cmd
        assert result["ok"] is True
        assert result["path_hint"] is True

    @patch(f"{_STRAT}._run_subprocess", side_effect=[_FAIL, _OK])
    def test_second_variant(self, mock_run, _deps) -> None:
        result = strategies.install_pip(make_env(os_id="fedora", pm="dnf"))
        assert result["ok"] is True
        assert "--break-system-packages" not in result["command"]

    @patch(f"{_STRAT}._run_subprocess", return_value=_FAIL)
    def test_both_fail(self, _run, _deps) -> None:
        with pytest.raises(PackageInstallFailed, match="cryptnox-cli"):
            strategies.install_pip(make_env())

    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_no_path_hint_when_local_bin_on_path(self, _run, _deps, monkeypatch) -> None:
        local_bin = str(Path("~/.local/bin").expanduser())
        monkeypatch.setenv("PATH", f"{local_bin}:/usr/bin")
        assert strategies.install_pip(make_env())["path_hint"] is False


class TestConnectInterfaces:
    @patch(f"{_STRAT}._run_subprocess", return_value=_OK)
    def test_uses_sudo(self, mock_run) -> None:
        strategies.connect_snap_interfaces()
        assert mock_run.call_args_list[0] == call(
            ["snap", "connect", "cryptnox:raw-usb"], needs_sudo=True, timeout=60,
        )
