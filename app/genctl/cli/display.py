"""Shared Rich display functions for the confirm/undo flow.

Provides reusable printers for confirmation popups, command outcomes
and the undo countdown across the mutating commands (restore, delete,
store actions).
"""

import time
from typing import NoReturn

import typer

from genctl.core.session import GenerationSession, Popup, SessionState
from genctl.models.action import CommandOutcome
from genctl.models.generation import Generation
from genctl.utils.formatting import console, print_error, print_info, print_success

# Seconds between countdown refreshes
_TICK_INTERVAL = 0.2


def generation_to_dict(gen: Generation) -> dict[str, object]:
    """Convert a generation to a JSON-serializable dictionary."""
    return {
        "id": gen.id,
        "date": gen.timestamp.isoformat(),
        "is_current": gen.is_current,
        "version": gen.version,
        "kernel_version": gen.kernel_version,
        "package_count": gen.package_count,
        "closure_size": gen.closure_size,
        "store_path": gen.store_path,
        "is_pinned": gen.is_pinned,
        "in_bootloader": gen.in_bootloader,
    }


def show_confirmation(popup: Popup) -> None:
    """Print a confirmation popup with the exact command text."""
    console.print(f"\n[bold_header]{popup.title}[/]")
    console.print(f"  {popup.message}")
    console.print(f"  [muted]Command:[/] {popup.command}\n", highlight=False, soft_wrap=True)


def exit_rejected(session: GenerationSession) -> NoReturn:
    """Print why a request was rejected and exit with status 1."""
    message = session.flash.text if session.flash is not None else "Request rejected"
    print_error(message)
    raise typer.Exit(code=1)


def confirm_pending(session: GenerationSession, yes: bool) -> CommandOutcome | None:
    """Show the pending confirmation, ask, and execute.

    Args:
        session: Session in the CONFIRMING state.
        yes: Skip the interactive prompt.

    Returns:
        The outcome, or None if the user cancelled.
    """
    if session.popup is not None:
        show_confirmation(session.popup)

    if not yes and not typer.confirm("Proceed?"):
        session.cancel()
        print_info("Cancelled.")
        return None

    return session.confirm()


def report_outcome(session: GenerationSession, outcome: CommandOutcome) -> None:
    """Print an outcome, exiting with status 1 on failure.

    Raises:
        typer.Exit: If the outcome is a failure.
    """
    if outcome.failed:
        print_error(outcome.message)
        session.acknowledge()
        raise typer.Exit(code=1)

    if session.state is SessionState.UNDO_PENDING and session.pending_undo is not None:
        print_success(session.pending_undo.message)
    else:
        print_success(outcome.message)
    if session.dry_run and outcome.command:
        console.print(f"  [muted]Command:[/] {outcome.command}", highlight=False, soft_wrap=True)


def wait_for_undo_window(session: GenerationSession) -> None:
    """Show the undo countdown until it expires or Ctrl+C closes it.

    Nothing is reverted either way.
    """
    try:
        with console.status("") as status:
            while session.state is SessionState.UNDO_PENDING:
                session.tick()
                status.update(
                    f"Undo notice: {session.undo_remaining()}s remaining "
                    "[muted](Ctrl+C to close)[/]"
                )
                time.sleep(_TICK_INTERVAL)
    except KeyboardInterrupt:
        session.dismiss_undo()

    if session.flash is not None:
        print_info(session.flash.text)
