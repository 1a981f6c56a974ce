"""
L0 Data — ``__init__.py`` re-exports all data tables.

Pure data. No logic, no I/O.
"""

from cryptnox_installer.core.services.installer.data.constants import (  # noqa: F401
    _IARCH_MAP,
    _PIP,
    DEB_OS_TAG_DEFAULT,
    DEB_OS_TAGS,
    PACKAGE_MANAGER_PROBES,
    SCRATCH_PREFIX,
    SYSTEM_SITE_PREFIXES,
    VERSION_PATTERN,
)
from cryptnox_installer.core.services.installer.data.system_packages import (  # noqa: F401
    DEB_BUILD_DEPS,
    REFRESH_BEFORE_INSTALL,
    SYSTEM_DEPS,
)
from cryptnox_installer.core.services.installer.data.undo_catalog import (  # noqa: F401
    UNDO_COMMANDS,
)
