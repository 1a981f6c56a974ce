from cryptnox_installer.core.services.deb_build.builder import (  # noqa: F401
    BuildResult,
    build_deb,
)
