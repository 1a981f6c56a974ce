"""
Installer service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → resolver → detection → execution →
orchestration)::

    from cryptnox_installer.core.services.installer import probe, select_strategy, execute
"""

# ── Errors ──
from cryptnox_installer.core.services.installer.errors import (  # noqa: F401
    BuildError,
    CannotBootstrapSnap,
    ChecksumMismatch,
    InstallerError,
    InvalidVersionFormat,
    MissingElevationTool,
    PackageInstallFailed,
    WrongPackageManager,
)

# ── L2: Resolver ──
from cryptnox_installer.core.services.installer.resolver import (  # noqa: F401
    resolve_version,
    select_strategy,
    validate_version,
)

# ── L3: Detection ──
from cryptnox_installer.core.services.installer.detection import (  # noqa: F401
    get_installed_versions,
    probe,
)

# ── L4: Execution ──
from cryptnox_installer.core.services.installer.execution import (  # noqa: F401
    setup_card_reader,
    verify_checksum,
)

# ── L5: Orchestration ──
from cryptnox_installer.core.services.installer.orchestration import (  # noqa: F401
    execute,
    install_auto,
    status,
    uninstall,
    update,
    versions,
)
