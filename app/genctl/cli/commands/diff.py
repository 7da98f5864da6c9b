"""Diff command implementation.

Compares the package sets of two generations of the same profile.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from genctl.cli.types import load_config_or_exit, require_source
from genctl.core.diff import DiffError, GenerationDiff, GenerationDiffer
from genctl.models.generation import ProfileType
from genctl.utils.formatting import console, print_error, print_success


def _create_diff_table(old_id: int, new_id: int) -> Table:
    """Create a table for displaying diff results.

    Returns:
        Rich Table configured for diff display.
    """
    table = Table(
        title=f"Generation {old_id} → {new_id}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Package", no_wrap=True)
    table.add_column("Version")
    table.add_column("Note")
    return table


def _add_diff_rows(table: Table, result: GenerationDiff) -> None:
    """Add entries in order: added, removed, updated."""
    for pkg in result.added:
        table.add_row("[added][+][/]", f"[added]{pkg.name}[/]", pkg.version or "-", "")
    for pkg in result.removed:
        table.add_row("[removed][-][/]", f"[removed]{pkg.name}[/]", pkg.version or "-", "")
    for update in result.updated:
        notes = []
        if update.is_kernel:
            notes.append("kernel")
        if update.is_security:
            notes.append("security")
        table.add_row(
            "[changed][~][/]",
            f"[changed]{update.name}[/]",
            f"{update.old_version or '-'} → {update.new_version or '-'}",
            f"[muted]{', '.join(notes)}[/]",
        )


def _print_summary(result: GenerationDiff) -> None:
    """Print summary line for diff results."""
    parts: list[str] = []

    if result.added:
        parts.append(f"[added]{len(result.added)} added[/]")
    if result.removed:
        parts.append(f"[removed]{len(result.removed)} removed[/]")
    if result.updated:
        parts.append(f"[changed]{len(result.updated)} updated[/]")

    summary = ", ".join(parts)
    console.print(f"\nSummary: {summary} ({result.total_changes} total changes)")
    if result.kernel_updates:
        console.print(f"[warning]Kernel updates: {len(result.kernel_updates)}[/]")
    if result.security_updates:
        console.print(f"[warning]Security-relevant updates: {len(result.security_updates)}[/]")


def diff_generations(
    old_id: Annotated[
        int,
        typer.Argument(help="Older generation number.", min=0),
    ],
    new_id: Annotated[
        int,
        typer.Argument(help="Newer generation number.", min=0),
    ],
    profile: Annotated[
        ProfileType,
        typer.Option(
            "--profile",
            "-p",
            help="Profile of both generations.",
            case_sensitive=False,
        ),
    ] = ProfileType.SYSTEM,
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Compare the packages of two generations.

    Difference types:
      [+] ADDED: Package only in the newer generation
      [-] REMOVED: Package only in the older generation
      [~] UPDATED: Package in both with a different version

    Examples:
        genctl diff 41 42                  # Show all differences
        genctl diff 41 42 --brief          # Summary counts only
        genctl diff 3 5 -p home-manager    # Home-Manager generations
        genctl diff 41 42 --json           # JSON output for scripting
    """
    config = load_config_or_exit()
    source = require_source(profile, config)
    differ = GenerationDiffer(timeout=config.timeouts.package_listing)

    try:
        with console.status(f"Comparing generations {old_id} and {new_id}..."):
            result = differ.compare(source, old_id, source, new_id)
    except DiffError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    if result.is_empty:
        print_success("No package differences found.")
        return

    if not brief:
        table = _create_diff_table(old_id, new_id)
        _add_diff_rows(table, result)
        console.print(table)

    _print_summary(result)
