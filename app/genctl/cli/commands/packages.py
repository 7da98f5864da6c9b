"""Packages command for listing the packages of one generation."""

import json
from typing import Annotated

import typer

from genctl.cli.types import load_config_or_exit, require_source
from genctl.core.packages import get_packages
from genctl.models.generation import ProfileType
from genctl.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_error,
    print_info,
)


def packages(
    generation_id: Annotated[
        int,
        typer.Argument(help="Generation number.", min=0),
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
    name_filter: Annotated[
        str,
        typer.Option(
            "--filter",
            "-f",
            help="Only show packages whose name contains this text.",
        ),
    ] = "",
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List the packages of a generation, sorted by name.

    Examples:
        genctl packages 42
        genctl packages 12 -p home-manager -f firefox
    """
    config = load_config_or_exit()
    source = require_source(profile, config)

    gen_path = source.generation_path(generation_id)
    if not gen_path.exists():
        print_error(f"Generation {generation_id} not found: {gen_path}")
        raise typer.Exit(code=1)

    with console.status(f"Reading packages of generation {generation_id}..."):
        found = get_packages(gen_path, timeout=config.timeouts.package_listing)

    needle = name_filter.lower()
    if needle:
        found = [p for p in found if needle in p.name.lower()]

    if json_output:
        data = [{"name": p.name, "version": p.version, "size": p.size} for p in found]
        console.print_json(json.dumps(data))
        return

    if not found:
        print_info("No packages found.")
        return

    table = create_package_table(f"{profile.label} Generation {generation_id}")
    for pkg in found:
        table.add_row(*format_package_row(pkg))
    console.print(table)
    console.print(f"\n[muted]{len(found)} package(s)[/]")
