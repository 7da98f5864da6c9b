"""Config commands for inspecting and creating the configuration file."""

from typing import Annotated

import tomli_w
import typer

from genctl.cli.types import load_config_or_exit
from genctl.core.config import ConfigError, GenctlConfig, save_config
from genctl.core.paths import get_config_path
from genctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the genctl configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    config = load_config_or_exit()
    console.print(tomli_w.dumps(config.model_dump(mode="python")), highlight=False, markup=False)


@app.command()
def path() -> None:
    """Print the location of the configuration file."""
    config_path = get_config_path()
    typer.echo(str(config_path))
    if not config_path.exists():
        print_info("File does not exist yet; defaults are in effect.")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing configuration file.",
        ),
    ] = False,
) -> None:
    """Write a configuration file with the default values.

    Examples:
        genctl config init            # Create ~/.config/genctl/config.toml
        genctl config init --force    # Reset to defaults
    """
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        written = save_config(GenctlConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {written}")
