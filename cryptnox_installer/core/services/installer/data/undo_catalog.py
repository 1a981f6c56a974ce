"""
L0 Data — Removal commands for each installation channel.

Templates use a ``{package}`` placeholder resolved at removal time.
A channel maps to a list of commands run in order; only the first
one decides whether the removal succeeded.
"""

from __future__ import annotations

UNDO_COMMANDS: dict[str, dict] = {
    "snap": {
        "commands": [["snap", "remove", "{package}"]],
        "needs_sudo": True,
    },
    "deb": {
        "commands": [
            ["apt-get", "remove", "-y", "{package}"],
            ["apt-get", "autoremove", "-y"],
        ],
        "needs_sudo": True,
    },
    "dnf": {
        "commands": [["dnf", "remove", "-y", "{package}"]],
        "needs_sudo": True,
    },
    "yum": {
        "commands": [["yum", "remove", "-y", "{package}"]],
        "needs_sudo": True,
    },
    "zypper": {
        "commands": [["zypper", "remove", "-y", "{package}"]],
        "needs_sudo": True,
    },
}
