"""CLI package for genctl.

This package contains the Typer application and all subcommands.
"""

from genctl.cli.main import app

__all__ = ["app"]
