"""
Tests for the config loader and the installer context.
"""

from pathlib import Path

import pytest

from cryptnox_installer.core import context
from cryptnox_installer.core.config.loader import (
    CONFIG_FILE,
    ConfigError,
    find_config_file,
    load_config,
)
from cryptnox_installer.core.models.config import InstallerConfig


class TestFindConfigFile:
    def test_in_start_dir(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(
            "cryptnox_installer.core.config.loader.USER_CONFIG_PATH", tmp_path / "none.yml",
        )
        (tmp_path / CONFIG_FILE).write_text("snap_name: cryptnox\n")
        assert find_config_file(tmp_path) == tmp_path / CONFIG_FILE

    def test_env_var_wins(self, tmp_path: Path, monkeypatch):
        (tmp_path / CONFIG_FILE).write_text("")
        other = tmp_path / "elsewhere.yml"
        monkeypatch.setenv("CRYPTNOX_INSTALLER_CONFIG", str(other))
        assert find_config_file(tmp_path) == other

    def test_user_config(self, tmp_path: Path, monkeypatch):
        user = tmp_path / "config.yml"
        user.write_text("")
        monkeypatch.setattr("cryptnox_installer.core.config.loader.USER_CONFIG_PATH", user)
        assert find_config_file(tmp_path / "empty-dir") == user

    def test_not_found(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(
            "cryptnox_installer.core.config.loader.USER_CONFIG_PATH", tmp_path / "none.yml",
        )
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "cryptnox_installer.core.config.loader.USER_CONFIG_PATH", tmp_path / "none.yml",
        )
        config = load_config()
        assert config == InstallerConfig()
        assert config.package_name == "cryptnox-cli"
        assert config.default_version == "1.0.3"

    def test_flat_file(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("default_version: 1.1.0\nprobe_timeout: 3\n")
        config = load_config(path)
        assert config.default_version == "1.1.0"
        assert config.probe_timeout == 3
        assert config.snap_name == "cryptnox"

    def test_wrapped_file(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("installer:\n  snap_interfaces: [raw-usb]\n")
        assert load_config(path).snap_interfaces == ["raw-usb"]

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("")
        assert load_config(path) == InstallerConfig()

    def test_explicit_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("snap_name: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("snapname: typo\n")
        with pytest.raises(ConfigError, match="Invalid installer configuration"):
            load_config(path)

    def test_bad_type(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("command_timeout: forever\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestContext:
    def test_defaults_until_set(self):
        assert context.get_config() == InstallerConfig()

    def test_set_and_reset(self):
        context.set_config(InstallerConfig(snap_name="cryptnox-beta"))
        assert context.get_config().snap_name == "cryptnox-beta"
        context.set_config(None)
        assert context.get_config().snap_name == "cryptnox"
