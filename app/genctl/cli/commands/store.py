"""Store commands for inspecting and cleaning the Nix store.

Provides `genctl store info` for the storage report and the cleanup
actions `gc`, `optimise` and `full-clean`. Cleanup results are recorded
in the cleanup history.
"""

import json
import time
from collections.abc import Callable
from typing import Annotated

import typer

from genctl.cli.display import confirm_pending, exit_rejected, report_outcome
from genctl.cli.types import load_config_or_exit, resolve_dry_run
from genctl.core.session import GenerationSession
from genctl.models.store import DiskUsage, StoreInfo, StorePath
from genctl.utils.formatting import (
    console,
    create_store_table,
    format_store_row,
    print_info,
    print_warning,
)
from genctl.utils.units import format_bytes

app = typer.Typer(
    help="Inspect and clean the Nix store.",
    no_args_is_help=True,
)

# Seconds between background task polls
_POLL_INTERVAL = 0.1

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        "-n",
        help="Show the command without executing it.",
    ),
]
YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Skip confirmation prompt.",
    ),
]


def _disk_to_dict(disk: DiskUsage | None) -> dict[str, object] | None:
    if disk is None:
        return None
    return {
        "filesystem": disk.filesystem,
        "mount_point": disk.mount_point,
        "total": disk.total,
        "used": disk.used,
        "available": disk.available,
        "percent": disk.percent,
    }


def _info_to_dict(info: StoreInfo, paths: list[StorePath]) -> dict[str, object]:
    return {
        "disk_store": _disk_to_dict(info.disk_store),
        "disk_root": _disk_to_dict(info.disk_root),
        "total_paths": info.total_paths,
        "live_paths": info.live_paths,
        "dead_paths": info.dead_paths,
        "total_size": info.total_size,
        "live_size": info.live_size,
        "dead_size": info.dead_size,
        "has_sizes": info.has_sizes,
        "paths": [
            {"path": p.path, "name": p.name, "size": p.size, "is_dead": p.is_dead}
            for p in paths
        ],
    }


def _print_disk(label: str, disk: DiskUsage) -> None:
    console.print(
        f"[bold_header]{label}:[/] {format_bytes(disk.used)} / {format_bytes(disk.total)} "
        f"({disk.percent:.0f}%), {format_bytes(disk.available)} free "
        f"[muted]({disk.mount_point})[/]"
    )


def _print_report(info: StoreInfo) -> None:
    """Print disk usage and path counts."""
    if info.disk_root is not None:
        _print_disk("Root", info.disk_root)
    if info.disk_store is not None:
        _print_disk("Store", info.disk_store)

    console.print(
        f"[bold_header]Paths:[/] {info.total_paths} "
        f"([live]{info.live_paths} live[/], [dead]{info.dead_paths} dead[/])"
    )
    if info.has_sizes:
        console.print(
            f"[bold_header]Size:[/] {format_bytes(info.total_size)} "
            f"([live]{format_bytes(info.live_size)} live[/], "
            f"[dead]{format_bytes(info.dead_size)} reclaimable[/])"
        )
    else:
        print_warning("Path sizes are unavailable.")


def load_report(session: GenerationSession) -> StoreInfo:
    """Run the store analysis in the background behind a spinner."""
    session.start_store_load()
    with console.status("Analysing the Nix store..."):
        while session.store_loading:
            session.tick()
            time.sleep(_POLL_INTERVAL)

    if session.flash is not None and session.flash.is_error:
        print_warning(session.flash.text)
    return session.store_info or StoreInfo.empty()


@app.command()
def info(
    dead: Annotated[
        bool,
        typer.Option("--dead", help="Only list dead (reclaimable) paths."),
    ] = False,
    live: Annotated[
        bool,
        typer.Option("--live", help="Only list live paths."),
    ] = False,
    search: Annotated[
        str,
        typer.Option("--search", "-s", help="Only list paths whose name contains this text."),
    ] = "",
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Maximum number of paths to list.", min=0),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show disk usage and the largest store paths.

    Examples:
        genctl store info                 # Summary and 20 largest paths
        genctl store info --dead -l 50    # 50 largest reclaimable paths
        genctl store info -s python       # Paths matching "python"
    """
    if dead and live:
        print_warning("--dead and --live together list every path.")
    liveness = None if dead == live else dead

    config = load_config_or_exit()
    session = GenerationSession({}, config=config)
    report = load_report(session)

    paths = report.filter_paths(dead=liveness, query=search)
    shown = paths[:limit]

    if json_output:
        console.print_json(json.dumps(_info_to_dict(report, shown)))
        return

    _print_report(report)

    if not shown:
        print_info("No store paths to list.")
        return

    table = create_store_table()
    for path in shown:
        table.add_row(*format_store_row(path, report.has_sizes))
    console.print(table)
    if len(shown) < len(paths):
        console.print(f"[muted](showing {len(shown)} of {len(paths)})[/]")


def _run_store_action(
    request: Callable[[GenerationSession], bool],
    dry_run: bool,
    yes: bool,
) -> None:
    config = load_config_or_exit()
    session = GenerationSession({}, config=config, dry_run=resolve_dry_run(dry_run, config))

    if not request(session):
        exit_rejected(session)

    outcome = confirm_pending(session, yes)
    if outcome is not None:
        report_outcome(session, outcome)


@app.command()
def gc(dry_run: DryRunOption = False, yes: YesOption = False) -> None:
    """Delete unreachable store paths (nix-collect-garbage)."""
    _run_store_action(GenerationSession.request_gc, dry_run, yes)


@app.command()
def optimise(dry_run: DryRunOption = False, yes: YesOption = False) -> None:
    """Hard-link identical files in the store (nix store optimise)."""
    _run_store_action(GenerationSession.request_optimise, dry_run, yes)


@app.command("full-clean")
def full_clean(dry_run: DryRunOption = False, yes: YesOption = False) -> None:
    """Delete all old generations and collect garbage (sudo nix-collect-garbage -d)."""
    _run_store_action(GenerationSession.request_full_clean, dry_run, yes)
