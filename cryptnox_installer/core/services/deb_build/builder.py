"""
Debian package builder — sdist from PyPI → ``dpkg-buildpackage``.

Downloads the cryptnox-cli source distribution, lays it out the way
debhelper expects (``<pkg>-<version>/debian``), installs the build
toolchain and runs ``dpkg-buildpackage -us -uc -b``.
"""

from __future__ import annotations

import json
import logging
import shutil
import tarfile
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.services.installer.data.system_packages import DEB_BUILD_DEPS
from cryptnox_installer.core.services.installer.errors import BuildError
from cryptnox_installer.core.services.installer.execution.download import (
    download_file,
    fetch_text,
)
from cryptnox_installer.core.services.installer.execution.subprocess_runner import (
    _run_subprocess,
)
from cryptnox_installer.core.services.installer.resolver.command_building import (
    _build_pkg_install_cmd,
)
from cryptnox_installer.core.services.installer.resolver.version_resolution import (
    validate_version,
)

logger = logging.getLogger(__name__)

BUILD_DIR_PREFIX = "cryptnox-deb-build."
_BUILD_TIMEOUT = 3600


@dataclass
class BuildResult:
    """Outcome of a package build."""

    version: str
    build_dir: Path
    packages: list[Path] = field(default_factory=list)
    copied_to: Path | None = None
    kept: bool = True

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "version": self.version,
            "build_dir": str(self.build_dir),
            "packages": [p.name for p in self.packages],
            "copied_to": str(self.copied_to) if self.copied_to else None,
            "kept": self.kept,
        }


def sdist_filename(package: str, version: str) -> str:
    """``cryptnox-cli`` + ``1.0.3`` → ``cryptnox_cli-1.0.3.tar.gz``."""
    return f"{package.replace('-', '_')}-{version}.tar.gz"


def sdist_url(package: str, version: str) -> str:
    """Direct files.pythonhosted.org URL for the sdist."""
    project = package.replace("-", "_")
    return get_config().pypi_sdist_url.format(
        initial=project[0],
        project=project,
        filename=sdist_filename(package, version),
    )


def _sdist_url_from_api(package: str, version: str) -> str | None:
    """Ask the PyPI JSON API for the sdist URL of a release."""
    url = get_config().pypi_version_json_url.format(package=package, version=version)
    body = fetch_text(url)
    if body is None:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    for entry in data.get("urls", []) if isinstance(data, dict) else []:
        if entry.get("packagetype") == "sdist":
            return entry.get("url")
    return None


def download_sdist(package: str, version: str, dest_dir: Path) -> Path:
    """Download the sdist, falling back to the JSON API for the URL.

    Raises:
        BuildError: Neither source produced the archive.
    """
    dest = dest_dir / sdist_filename(package, version)
    logger.info("Downloading %s %s from PyPI...", package, version)
    if download_file(sdist_url(package, version), dest)["ok"]:
        return dest

    logger.info("Direct download failed, trying PyPI API...")
    api_url = _sdist_url_from_api(package, version)
    if api_url is None:
        raise BuildError(f"No source distribution found for {package} {version}")
    result = download_file(api_url, dest)
    if not result["ok"]:
        raise BuildError(f"Failed to download {api_url}: {result['error']}")
    return dest


def extract_sdist(archive: Path, dest_dir: Path) -> None:
    """Extract a ``.tar.gz``, refusing members that escape ``dest_dir``."""
    root = dest_dir.resolve()
    try:
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                target = (root / member.name).resolve()
                if target != root and root not in target.parents:
                    raise BuildError(f"Unsafe path in archive: {member.name}")
                if member.issym() or member.islnk():
                    raise BuildError(f"Links are not allowed in archive: {member.name}")
            tar.extractall(root, filter="data")
    except tarfile.TarError as e:
        raise BuildError(f"Cannot extract {archive.name}: {e}") from e


def find_source_dir(build_dir: Path, package: str, version: str) -> Path:
    """Locate the extracted source tree.

    Usually ``<pkg_underscore>-<version>``; otherwise the first directory
    starting with either spelling of the package name.
    """
    underscore = package.replace("-", "_")
    expected = build_dir / f"{underscore}-{version}"
    if expected.is_dir():
        return expected

    for child in sorted(build_dir.iterdir()):
        if child.is_dir() and child.name.startswith((package, underscore)):
            return child

    raise BuildError(f"Could not find extracted source directory in {build_dir}")


def bump_changelog(changelog: Path, default_version: str, version: str) -> bool:
    """Point ``debian/changelog`` at ``version`` when it differs from the default."""
    if version == default_version or not changelog.is_file():
        return False
    text = changelog.read_text(encoding="utf-8")
    updated = text.replace(f"{default_version}-1", f"{version}-1")
    changelog.write_text(updated, encoding="utf-8")
    return updated != text


def install_build_deps() -> None:
    """apt-get update + install the debhelper toolchain.

    Raises:
        BuildError: Either apt step failed.
    """
    logger.info("Installing build dependencies...")
    cmd = _build_pkg_install_cmd(list(DEB_BUILD_DEPS), "apt")
    for step in (["apt-get", "update"], cmd):
        r = _run_subprocess(step, needs_sudo=True, timeout=get_config().command_timeout)
        if not r["ok"]:
            raise BuildError(
                f"'{' '.join(step)}' failed: {r.get('stderr') or r['error']}"
            )


def build_deb(
    version: str | None = None,
    *,
    debian_dir: Path,
    build_dir: Path | None = None,
    skip_deps: bool = False,
    keep_build_dir: bool = False,
    artifacts_dir: Path | None = None,
) -> BuildResult:
    """Build the cryptnox-cli Debian package.

    Args:
        version: Version to package (defaults to the configured default).
        debian_dir: The ``debian/`` packaging directory to copy in.
        build_dir: Working directory. A temporary one is created (and
            removed afterwards unless ``keep_build_dir``) when omitted.
        skip_deps: Don't apt-install the build toolchain.
        keep_build_dir: Keep a temporary build dir (CI artifact upload).
        artifacts_dir: If given, ``.deb`` files are copied to
            ``<artifacts_dir>/dist``.

    Returns:
        BuildResult listing the produced packages.

    Raises:
        InvalidVersionFormat: Bad version string.
        BuildError: Any build step failed.
    """
    cfg = get_config()
    version = validate_version(version or cfg.default_version)
    package = cfg.package_name

    temporary = build_dir is None
    if build_dir is None:
        build_dir = Path(tempfile.mkdtemp(prefix=BUILD_DIR_PREFIX))
    build_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Building %s %s deb package in %s", package, version, build_dir)

    try:
        result = _build_in(
            build_dir,
            package=package,
            version=version,
            debian_dir=debian_dir,
            skip_deps=skip_deps,
            default_version=cfg.default_version,
        )
    except BaseException:
        if temporary and not keep_build_dir:
            shutil.rmtree(build_dir, ignore_errors=True)
        raise

    if artifacts_dir is not None and result.packages:
        dist = artifacts_dir / "dist"
        dist.mkdir(parents=True, exist_ok=True)
        for deb in result.packages:
            shutil.copy2(deb, dist / deb.name)
        result.copied_to = dist
        logger.info("Artifacts copied to: %s", dist)

    # A temporary dir is only discarded once the packages live elsewhere.
    if temporary and not keep_build_dir and result.copied_to is not None:
        shutil.rmtree(build_dir, ignore_errors=True)
        result.kept = False
    return result


def _build_in(
    build_dir: Path,
    *,
    package: str,
    version: str,
    debian_dir: Path,
    skip_deps: bool,
    default_version: str,
) -> BuildResult:
    if not debian_dir.is_dir():
        raise BuildError(f"debian/ directory not found at {debian_dir}")

    archive = download_sdist(package, version, build_dir)
    extract_sdist(archive, build_dir)
    src_dir = find_source_dir(build_dir, package, version)

    # Debian expects <source-package>-<upstream-version>
    source_tree = build_dir / f"{package}-{version}"
    if src_dir != source_tree:
        if source_tree.exists():
            shutil.rmtree(source_tree)
        src_dir.rename(source_tree)

    shutil.copytree(debian_dir, source_tree / "debian", dirs_exist_ok=True)
    if bump_changelog(source_tree / "debian" / "changelog", default_version, version):
        logger.info("debian/changelog bumped to %s-1", version)

    if skip_deps:
        logger.info("Skipping dependency installation")
    else:
        install_build_deps()

    logger.info("Building package...")
    r = _run_subprocess(
        ["dpkg-buildpackage", "-us", "-uc", "-b"],
        cwd=str(source_tree),
        timeout=_BUILD_TIMEOUT,
    )
    if not r["ok"]:
        raise BuildError(f"dpkg-buildpackage failed: {r.get('stderr') or r['error']}")

    packages = sorted(build_dir.glob("*.deb"))
    if not packages:
        logger.warning("No .deb files found in %s", build_dir)
    return BuildResult(version=version, build_dir=build_dir, packages=packages)
