"""
CLI command for building the cryptnox-cli Debian package.

Thin wrapper over ``cryptnox_installer.core.services.deb_build``.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from cryptnox_installer.core.observability.logging_config import resolve_level, setup_logging


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("version", required=False)
@click.option(
    "--debian-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("debian"),
    show_default=True,
    help="debian/ packaging directory to copy into the source tree.",
)
@click.option(
    "--build-dir",
    envvar="BUILD_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working directory (default: a temporary directory).",
)
@click.option("--skip-deps", envvar="SKIP_DEPS", is_flag=True,
              help="Don't install the build toolchain.")
@click.option("--ci", "ci", envvar="CI", is_flag=True,
              help="Keep the build directory for artifact upload.")
@click.option(
    "--artifacts-dir",
    envvar="GITHUB_WORKSPACE",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Copy built packages to <dir>/dist.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to cryptnox-installer.yml (default: auto-detect).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def build_deb_cmd(
    version: str | None,
    debian_dir: Path,
    build_dir: Path | None,
    skip_deps: bool,
    ci: bool,
    artifacts_dir: Path | None,
    config_path: str | None,
    verbose: bool,
    as_json: bool,
) -> None:
    """Build the cryptnox-cli .deb from its PyPI source distribution.

    VERSION defaults to the configured default version.
    """
    setup_logging(
        level=resolve_level(
            verbose=verbose,
            env_level=os.environ.get("CRYPTNOX_LOG_LEVEL") or "INFO",
        ),
        log_file=os.environ.get("CRYPTNOX_LOG_FILE"),
        log_file_level=os.environ.get("CRYPTNOX_LOG_FILE_LEVEL"),
    )

    from cryptnox_installer.core.config.loader import ConfigError, load_config
    from cryptnox_installer.core.context import set_config
    from cryptnox_installer.core.services.deb_build import build_deb
    from cryptnox_installer.core.services.installer.errors import InstallerError

    try:
        set_config(load_config(Path(config_path) if config_path else None))
        result = build_deb(
            version,
            debian_dir=debian_dir,
            build_dir=build_dir,
            skip_deps=skip_deps,
            keep_build_dir=ci,
            artifacts_dir=artifacts_dir,
        )
    except (InstallerError, ConfigError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"✅ Built {len(result.packages)} package(s) for {result.version}", fg="green", bold=True)
    for deb in result.packages:
        click.echo(f"   📦 {deb.name}")
    if result.copied_to:
        click.echo(f"   Copied to: {result.copied_to}")
    if result.kept:
        click.echo(f"   Build directory: {result.build_dir}")


if __name__ == "__main__":
    build_deb_cmd()
