"""Restore command for switching a profile to an older generation.

This module provides the `genctl restore` command. The exact command
line is shown before anything runs.
"""

from typing import Annotated

import typer

from genctl.cli.display import confirm_pending, exit_rejected, report_outcome
from genctl.cli.types import load_config_or_exit, require_source, resolve_dry_run
from genctl.core.session import GenerationSession
from genctl.models.generation import ProfileType
from genctl.utils.formatting import console


def restore(
    generation_id: Annotated[
        int,
        typer.Argument(help="Generation number to switch to.", min=0),
    ],
    profile: Annotated[
        ProfileType,
        typer.Option(
            "--profile",
            "-p",
            help="Profile to restore.",
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
) -> None:
    """Switch a profile to another generation.

    The current generation cannot be restored.

    Examples:
        genctl restore 41                   # Restore system generation 41
        genctl restore 7 -p home-manager    # Activate Home-Manager generation 7
        genctl restore 41 --dry-run         # Preview only
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

    if not session.request_restore(profile, generation_id):
        exit_rejected(session)

    outcome = confirm_pending(session, yes)
    if outcome is not None:
        report_outcome(session, outcome)
