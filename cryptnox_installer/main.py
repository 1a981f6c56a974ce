"""
Cryptnox CLI Installer — CLI entrypoint.

Usage:
    cryptnox-install              # auto-detect the best channel
    cryptnox-install --snap       # install from the Snap Store
    cryptnox-install --status     # show system status
    python -m cryptnox_installer.main --help
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from cryptnox_installer import __version__
from cryptnox_installer.core.observability.logging_config import resolve_level, setup_logging

_ACTION_KEY = "cryptnox.action"

_EPILOG = """\b
Examples:
    cryptnox-install              # Auto-detect (Snap where available)
    cryptnox-install --native     # pip install with system dependencies
    cryptnox-install --snap       # Install from Snap Store
    cryptnox-install --update     # Update existing installation

\b
Environment:
    CRYPTNOX_VERSION     Version to install (default: latest on PyPI)
    CRYPTNOX_LOG_LEVEL   Console log level (default: WARNING)
"""


def _first_action(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Record the first action flag seen on the command line.

    Click runs callbacks in command-line order, so later flags lose.
    """
    if value and _ACTION_KEY not in ctx.meta:
        ctx.meta[_ACTION_KEY] = param.name


def _action_option(*decls: str, help: str):
    return click.option(
        *decls,
        is_flag=True,
        expose_value=False,
        callback=_first_action,
        help=help,
    )


@click.command(
    context_settings={"help_option_names": []},
    epilog=_EPILOG,
)
@click.version_option(
    __version__, "--installer-version", prog_name="cryptnox-install",
)
@_action_option("native", "--native", "--pip", help="Install via pip + system dependencies.")
@_action_option("snap", "--snap", help="Install via Snap Store.")
@_action_option("deb", "--deb", help="Install via Debian package.")
@_action_option("rpm", "--rpm", help="Install via pip with RPM-distro dependencies.")
@_action_option("update", "--update", help="Update to latest version.")
@_action_option("uninstall", "--uninstall", "--remove", help="Remove cryptnox.")
@_action_option("versions", "--version", "--check", help="Show installed versions.")
@_action_option("status", "--status", help="Show system status.")
@_action_option("setup", "--setup", help="Setup card reader (blacklist NFC modules).")
@_action_option("help", "-h", "--help", help="Show this message and exit.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to cryptnox-installer.yml (default: auto-detect).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True,
              help="Output as JSON (--version, --status).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Cryptnox CLI Installer — install and manage cryptnox-cli.

    With no option, detects the distribution and picks the best
    installation method.
    """
    action = ctx.meta.get(_ACTION_KEY, "auto")
    if action == "help":
        click.echo(ctx.get_help())
        return

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("CRYPTNOX_LOG_LEVEL"),
        ),
        log_file=os.environ.get("CRYPTNOX_LOG_FILE"),
        log_file_level=os.environ.get("CRYPTNOX_LOG_FILE_LEVEL"),
    )

    from cryptnox_installer.core.config.loader import ConfigError, load_config
    from cryptnox_installer.core.context import set_config
    from cryptnox_installer.core.services.installer.errors import InstallerError
    from cryptnox_installer.ui.cli import installer as actions

    opts = actions.Options(quiet=quiet, as_json=as_json)

    try:
        set_config(load_config(Path(config_path) if config_path else None))
        ok = actions.run_action(action, opts)
    except (InstallerError, ConfigError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
