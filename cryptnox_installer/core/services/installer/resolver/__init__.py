"""
L2 Resolver — ``__init__.py`` re-exports.

Decides WHAT to run: target version, strategy, concrete commands.
Only ``fetch_latest_version`` touches the network; nothing here
touches the system.
"""

from cryptnox_installer.core.services.installer.resolver.command_building import (  # noqa: F401
    _build_pkg_install_cmd,
    _derive_update_cmd,
    deb_artifact_name,
    deb_os_tag,
    pip_install_variants,
    pip_uninstall_variants,
)
from cryptnox_installer.core.services.installer.resolver.strategy_selection import (  # noqa: F401
    OsFamily,
    os_family,
    select_strategy,
)
from cryptnox_installer.core.services.installer.resolver.version_resolution import (  # noqa: F401
    fetch_latest_version,
    resolve_version,
    validate_version,
)
