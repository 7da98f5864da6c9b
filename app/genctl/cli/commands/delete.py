"""Delete command for removing old generations.

This module provides the `genctl delete` command. Current and pinned
generations are refused before any process is started; a completed
delete is followed by a short notice that cannot revert it.
"""

from typing import Annotated

import typer

from genctl.cli.display import (
    confirm_pending,
    exit_rejected,
    report_outcome,
    wait_for_undo_window,
)
from genctl.cli.types import load_config_or_exit, require_source, resolve_dry_run
from genctl.core.session import GenerationSession, SessionState
from genctl.models.generation import ProfileType
from genctl.utils.formatting import console


def delete(
    generation_ids: Annotated[
        list[int],
        typer.Argument(help="Generation numbers to delete."),
    ],
    profile: Annotated[
        ProfileType,
        typer.Option(
            "--profile",
            "-p",
            help="Profile to delete from.",
            case_sensitive=False,
        ),
    ] = ProfileType.SYSTEM,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show the command without executing it.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
    no_wait: Annotated[
        bool,
        typer.Option(
            "--no-wait",
            help="Exit right after deleting instead of showing the undo notice.",
        ),
    ] = False,
) -> None:
    """Delete generations of a profile.

    Examples:
        genctl delete 38                  # Delete system generation 38
        genctl delete 30 31 32 -y         # Delete several without prompting
        genctl delete 5 -p home-manager   # Delete a Home-Manager generation
        genctl delete 38 --dry-run        # Preview only
    """
    config = load_config_or_exit()
    source = require_source(profile, config)
    session = GenerationSession(
        {profile: source},
        config=config,
        dry_run=resolve_dry_run(dry_run, config),
    )

    with console.status("Reading generations..."):
        session.refresh(profile)

    if not session.request_delete(profile, generation_ids):
        exit_rejected(session)

    outcome = confirm_pending(session, yes)
    if outcome is None:
        return

    report_outcome(session, outcome)
    if session.state is SessionState.UNDO_PENDING and not no_wait:
        wait_for_undo_window(session)
