"""History command for viewing past store cleanups.

This module provides the `genctl history` command for viewing the
record of garbage collections and store optimisations.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from genctl.cli.types import load_config_or_exit
from genctl.core.state import HistoryLedger, history_summary
from genctl.models.history import HistoryEntry
from genctl.utils.formatting import console, print_info
from genctl.utils.units import format_bytes

app = typer.Typer(
    name="history",
    help="View history of store cleanups.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
            min=1,
        ),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of store cleanups, newest first.

    The summary covers every recorded entry, not only the shown ones.

    Examples:
        genctl history              # Show last 20 entries
        genctl history -n 50        # Show last 50 entries
        genctl history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit()
    entries = HistoryLedger(limit=config.history_limit).load()

    if json_output:
        _print_json(entries, limit)
        return

    if not entries:
        print_info("No history entries found.")
        return

    _print_table(entries[:limit])

    last_cleanup, total_freed = history_summary(entries)
    console.print(
        f"\n[muted]Last cleanup: {last_cleanup} | "
        f"Total freed: {format_bytes(total_freed)} over {len(entries)} action(s)[/]"
    )


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(
        title="Cleanup History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Timestamp", style="muted", no_wrap=True)
    table.add_column("Action", style="text")
    table.add_column("Freed", style="success", justify="right")
    table.add_column("Paths", style="info", justify="right")

    for entry in entries:
        table.add_row(
            entry.timestamp,
            entry.action,
            entry.freed_human,
            str(entry.paths_removed) if entry.paths_removed else "-",
        )

    console.print(table)


def _print_json(entries: list[HistoryEntry], limit: int) -> None:
    """Print history with its summary as JSON.

    Args:
        entries: All history entries, newest first.
        limit: Maximum number of entries to include.
    """
    last_cleanup, total_freed = history_summary(entries)
    data = {
        "last_cleanup": last_cleanup,
        "total_freed_bytes": total_freed,
        "entries": [e.to_dict() for e in entries[:limit]],
    }
    console.print_json(json.dumps(data))
