"""Generations command for listing profile generations.

This module provides the `genctl generations` command which lists the
generations of the system and Home-Manager profiles.
"""

import json
from typing import Annotated

import typer

from genctl.cli.display import generation_to_dict
from genctl.cli.types import ProfileChoice, get_sources, load_config_or_exit
from genctl.core.generations import discover_generations
from genctl.models.generation import Generation, ProfileType
from genctl.utils.formatting import (
    console,
    create_generation_table,
    format_generation_row,
    print_info,
)

app = typer.Typer(
    name="generations",
    help="List generations of the system and Home-Manager profiles.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def generations(
    ctx: typer.Context,
    profile: Annotated[
        ProfileChoice,
        typer.Option(
            "--profile",
            "-p",
            help="Profile to list.",
            case_sensitive=False,
        ),
    ] = ProfileChoice.ALL,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-l",
            help="Show only the newest N generations per profile.",
            min=1,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List generations, newest first.

    Markers: ● current, ★ pinned, B present in the bootloader.

    Examples:
        genctl generations                    # Both profiles
        genctl generations -p system -l 5     # Newest five system generations
        genctl generations --json             # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit()
    sources = get_sources(profile, config)

    results: dict[ProfileType, list[Generation]] = {}
    with console.status("Reading generations..."):
        for profile_type, source in sources.items():
            found = discover_generations(
                source,
                boot_root=config.boot_root_path,
                pinned_ids=config.pinned.for_profile(profile_type),
                listing_timeout=config.timeouts.generation_listing,
                closure_timeout=config.timeouts.closure_size,
            )
            results[profile_type] = found[:limit] if limit else found

    if json_output:
        data = {p.value: [generation_to_dict(g) for g in gens] for p, gens in results.items()}
        console.print_json(json.dumps(data))
        return

    if not any(results.values()):
        print_info("No generations found.")
        return

    for profile_type, gens in results.items():
        if not gens:
            print_info(f"No {profile_type.label} generations found.")
            continue
        table = create_generation_table(f"{profile_type.label} Generations")
        for gen in gens:
            table.add_row(*format_generation_row(gen))
        console.print(table)
