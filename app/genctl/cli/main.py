"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from genctl import __version__
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
from genctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="genctl",
    help="Manage NixOS generations and the Nix store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"genctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Show debug messages.
        quiet: Show errors only. Wins over ``verbose``.
    """
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = logging.ERROR

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """genctl - Manage NixOS generations and the Nix store.

    List, compare, restore and delete system and Home-Manager
    generations, and inspect and clean the Nix store.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(generations.app, name="generations")
app.command(name="packages")(packages.packages)
app.command(name="diff")(diff.diff_generations)
app.command(name="restore")(restore.restore)
app.command(name="delete")(delete.delete)
app.command(name="pin")(pin.pin)
app.command(name="unpin")(pin.unpin)
app.add_typer(store.app, name="store")
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
