"""
Configuration loader — reads cryptnox-installer.yml into InstallerConfig.

The file is optional: with no file every default applies. When a file
is found it is parsed with YAML and validated against the Pydantic
schema.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from cryptnox_installer.core.models.config import InstallerConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "cryptnox-installer.yml"
CONFIG_ENV_VAR = "CRYPTNOX_INSTALLER_CONFIG"
USER_CONFIG_PATH = Path("~/.config/cryptnox-installer/config.yml")


class ConfigError(Exception):
    """Raised when installer configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Locate the config file.

    Search order: ``$CRYPTNOX_INSTALLER_CONFIG``, ``./cryptnox-installer.yml``,
    ``~/.config/cryptnox-installer/config.yml``.

    Returns:
        Path to the config file, or None if not found.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    candidate = (start_dir or Path.cwd()) / CONFIG_FILE
    if candidate.is_file():
        return candidate

    user = USER_CONFIG_PATH.expanduser()
    if user.is_file():
        return user

    return None


def load_config(path: Path | None = None) -> InstallerConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit path to the config file. If None, searches.

    Returns:
        Validated InstallerConfig (all defaults when no file exists).

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        if explicit or os.environ.get(CONFIG_ENV_VAR):
            raise ConfigError(f"Config file not found: {path}")
        return InstallerConfig()

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return InstallerConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "installer" key or be flat
    section = data.get("installer", data)

    try:
        config = InstallerConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info("Loaded installer config for '%s' from %s", config.package_name, path)
    return config
