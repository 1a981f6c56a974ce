"""
CLI actions for the installer.

Thin wrappers over ``cryptnox_installer.core.services.installer``: each
action probes the host, calls one service function and renders the
result. Fatal failures propagate as ``InstallerError`` to ``main.cli``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

import click

from cryptnox_installer.core.context import get_config
from cryptnox_installer.core.models.environment import EnvironmentDescriptor
from cryptnox_installer.core.models.outcome import InstallationOutcome, InstallationStrategy

_INSTALL_ACTIONS = {
    "native": InstallationStrategy.NATIVE,
    "snap": InstallationStrategy.SNAP,
    "deb": InstallationStrategy.DEB,
    "rpm": InstallationStrategy.RPM,
}


@dataclass
class Options:
    """Presentation options shared by every action."""

    quiet: bool = False
    as_json: bool = False

    @property
    def chatty(self) -> bool:
        return not (self.quiet or self.as_json)


def run_action(action: str, opts: Options) -> bool:
    """Run one action by name. Returns False when the exit code must be 1."""
    if action in _INSTALL_ACTIONS or action == "auto":
        return _install(_INSTALL_ACTIONS.get(action), opts)
    handlers = {
        "update": _update,
        "uninstall": _uninstall,
        "versions": _versions,
        "status": _status,
        "setup": _setup,
    }
    return handlers[action](opts)


# ── Helpers ─────────────────────────────────────────────────────


def _probe(opts: Options) -> EnvironmentDescriptor:
    from cryptnox_installer.core.services.installer import probe

    env = probe()
    if opts.chatty:
        click.secho(f"🖥️  {env.os_pretty_name} ({env.architecture})", fg="cyan")
    return env


def _target_version(opts: Options) -> str:
    from cryptnox_installer.core.services.installer import resolve_version

    version = resolve_version(os.environ.get("CRYPTNOX_VERSION"))
    if opts.chatty:
        click.secho(f"🔐 Cryptnox CLI Installer — target v{version}", fg="cyan", bold=True)
    return version


def _render_outcome(outcome: InstallationOutcome, opts: Options) -> bool:
    if opts.as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        return outcome.success

    for note in outcome.notes:
        click.secho(f"⚠️  {note}", fg="yellow")

    if not outcome.success:
        click.secho(f"❌ {outcome.message}", fg="red", err=True)
        return False

    click.secho(f"✅ {outcome.message}", fg="green", bold=True)
    if not opts.quiet:
        click.echo(f"   Run: {get_config().cli_command} --help")
    return True


# ── Install / update ────────────────────────────────────────────


def _install(strategy: InstallationStrategy | None, opts: Options) -> bool:
    from cryptnox_installer.core.services.installer import execute, install_auto

    env = _probe(opts)
    version = _target_version(opts)
    if strategy is None:
        outcome = install_auto(version, env)
    else:
        outcome = execute(strategy, version, env)
    return _render_outcome(outcome, opts)


def _update(opts: Options) -> bool:
    from cryptnox_installer.core.services.installer import update

    env = _probe(opts)
    version = _target_version(opts)
    return _render_outcome(update(env, version), opts)


def _uninstall(opts: Options) -> bool:
    from cryptnox_installer.core.services.installer import uninstall

    report = uninstall(_probe(opts))

    if opts.as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return not report.failed

    if report.nothing_found:
        click.secho("⚠️  cryptnox is not installed", fg="yellow")
        return True

    for channel in sorted(report.removed, key=lambda s: s.value):
        click.secho(f"✅ Removed {channel.label} installation", fg="green")
    for channel in sorted(report.failed, key=lambda s: s.value):
        click.secho(f"❌ Failed to remove {channel.label} installation", fg="red", err=True)
    return not report.failed


# ── Queries ─────────────────────────────────────────────────────


def _versions(opts: Options) -> bool:
    from cryptnox_installer.core.services.installer.detection.channels import CHANNEL_PRIORITY
    from cryptnox_installer.core.services.installer.orchestration import (
        latest_version,
        versions,
    )

    installed = versions()
    latest = latest_version()

    if opts.as_json:
        click.echo(json.dumps({
            "installed": {k.value: v for k, v in installed.items()},
            "latest": latest,
        }, indent=2))
        return True

    click.secho("📦 Installed versions:", fg="cyan", bold=True)
    if not installed:
        click.echo("   Not installed")
    for channel in CHANNEL_PRIORITY:
        if channel in installed:
            click.echo(f"   {channel.label + ':':<6} {installed[channel]}")
    click.echo(f"   Latest: {latest or 'unavailable'}")
    return True


def _status(opts: Options) -> bool:
    from cryptnox_installer.core.services.installer import status
    from cryptnox_installer.core.services.installer.detection.channels import CHANNEL_PRIORITY

    env = _probe(opts)
    report = status(env)

    if opts.as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return True

    svc = report.service
    active = svc.get("active")
    icon = "❓" if active is None else ("✅" if active else "❌")
    click.secho("🔐 System status", fg="cyan", bold=True)
    click.echo(f"   {icon} {svc.get('service', get_config().service_name)}: {svc.get('state', 'unknown')}")

    click.secho("📦 Installed:", fg="cyan", bold=True)
    if not report.versions:
        click.echo("   Not installed")
    for channel in CHANNEL_PRIORITY:
        if channel in report.versions:
            click.echo(f"   {channel.label}: {report.versions[channel]}")
    if report.latest:
        click.echo(f"   Latest: {report.latest}")

    if report.snap_interfaces:
        click.secho("🔌 Snap interfaces:", fg="cyan", bold=True)
        for line in report.snap_interfaces:
            click.echo(f"   {line}")

    click.secho("💳 Card readers:", fg="cyan", bold=True)
    if report.reader_scan == "unavailable":
        click.echo("   pcsc_scan not available (install pcsc-tools)")
    elif not report.readers:
        click.echo(f"   None found ({report.reader_scan})")
    for reader in report.readers:
        click.echo(f"   {reader}")
    return True


# ── Setup ───────────────────────────────────────────────────────


def _setup(opts: Options) -> bool:
    from cryptnox_installer.core.services.installer import setup_card_reader

    result = setup_card_reader(_probe(opts))

    if opts.as_json:
        click.echo(json.dumps(result, indent=2))
        return True

    click.secho(f"✅ NFC modules blacklisted in {result['path']}", fg="green")
    if result.get("reboot_required"):
        click.secho("⚠️  Reboot required for changes to take effect", fg="yellow")
    return True
