"""Pin and unpin commands.

Pinned generations are protected from deletion. Pins are stored in the
``[pinned]`` table of the configuration file.
"""

from typing import Annotated

import typer

from genctl.cli.types import load_config_or_exit, require_source
from genctl.core.config import ConfigError, save_config, set_pinned
from genctl.models.generation import ProfileType
from genctl.utils.formatting import print_error, print_info, print_success


def update_pin(profile: ProfileType, generation_id: int, pinned: bool) -> None:
    """Persist the pin state of one generation.

    Raises:
        typer.Exit: If the generation does not exist or the config cannot be written.
    """
    config = load_config_or_exit()
    source = require_source(profile, config)

    gen_path = source.generation_path(generation_id)
    if not (gen_path.exists() or gen_path.is_symlink()):
        print_error(f"Generation {generation_id} not found: {gen_path}")
        raise typer.Exit(code=1)

    was_pinned = generation_id in config.pinned.for_profile(profile)
    if was_pinned == pinned:
        state = "already pinned" if pinned else "not pinned"
        print_info(f"{profile.label} generation {generation_id} is {state}.")
        return

    try:
        save_config(set_pinned(config, profile, generation_id, pinned))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Generation {generation_id} {'pinned' if pinned else 'unpinned'}")


def pin(
    generation_id: Annotated[
        int,
        typer.Argument(help="Generation number to pin.", min=0),
    ],
    profile: Annotated[
        ProfileType,
        typer.Option(
            "--profile",
            "-p",
            help="Profile of the generation.",
            case_sensitive=False,
        ),
    ] = ProfileType.SYSTEM,
) -> None:
    """Pin a generation so it cannot be deleted.

    Examples:
        genctl pin 41
        genctl pin 7 -p home-manager
    """
    update_pin(profile, generation_id, pinned=True)


def unpin(
    generation_id: Annotated[
        int,
        typer.Argument(help="Generation number to unpin.", min=0),
    ],
    profile: Annotated[
        ProfileType,
        typer.Option(
            "--profile",
            "-p",
            help="Profile of the generation.",
            case_sensitive=False,
        ),
    ] = ProfileType.SYSTEM,
) -> None:
    """Unpin a generation.

    Examples:
        genctl unpin 41
    """
    update_pin(profile, generation_id, pinned=False)
