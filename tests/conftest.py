"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from cryptnox_installer.core import context


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch: pytest.MonkeyPatch):
    """Every test starts from default configuration and no config file."""
    context.set_config(None)
    monkeypatch.delenv("CRYPTNOX_INSTALLER_CONFIG", raising=False)
    monkeypatch.delenv("CRYPTNOX_VERSION", raising=False)
    yield
    context.set_config(None)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
