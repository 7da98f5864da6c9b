"""CLI commands for genctl.

This package contains all subcommand implementations.
"""

from genctl.cli.commands import (
    config,
    delete,
    diff,
    generations,
    history,
    packages,
    pin,
    restore,
    store,
)

__all__ = [
    "config",
    "delete",
    "diff",
    "generations",
    "history",
    "packages",
    "pin",
    "restore",
    "store",
]
