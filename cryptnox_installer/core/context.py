"""
Installer context — the single source of truth for "which configuration
are we running with."

The config is set ONCE at startup by whichever entry point launches the
installer:

    - CLI:    main.py   → context.set_config(load_config(...))
    - Tests:  conftest  → context.set_config(InstallerConfig(...))

Design notes:
    - Module-level singleton (not a class).
    - get_config() never returns None: until set, it returns defaults.
"""

from __future__ import annotations

from typing import Optional

from cryptnox_installer.core.models.config import InstallerConfig

_config: Optional[InstallerConfig] = None


def set_config(config: InstallerConfig | None) -> None:
    """Register the configuration for the current process (None resets)."""
    global _config
    _config = config


def get_config() -> InstallerConfig:
    """Return the active configuration, falling back to defaults."""
    if _config is None:
        return InstallerConfig()
    return _config
