"""
L4 Execution — ``__init__.py`` re-exports.

Everything that WRITES system state: package installs, downloads,
config files. All subprocess calls go through ``_run_subprocess``.
"""

from cryptnox_installer.core.services.installer.execution.card_reader import (  # noqa: F401
    blacklist_content,
    setup_card_reader,
)
from cryptnox_installer.core.services.installer.execution.download import (  # noqa: F401
    download_file,
    expected_digest,
    fetch_text,
    sha256_file,
    verify_checksum,
)
from cryptnox_installer.core.services.installer.execution.strategies import (  # noqa: F401
    connect_snap_interfaces,
    install_deb,
    install_pip,
    install_python_extras,
    install_snap,
)
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (  # noqa: F401
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.execution.system_deps import (  # noqa: F401
    enable_service,
    install_system_deps,
    require_elevation,
)
from cryptnox_installer.core.services.installer.execution.tool_management import (  # noqa: F401
    refresh_snap,
    remove_channel,
    upgrade_pip,
    upgrade_rpm,
)
