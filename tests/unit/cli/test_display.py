"""Unit tests for cli/display.py.

Tests for the shared confirm/undo display helpers used by the mutating
commands.
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from genctl.cli.display import (
    confirm_pending,
    exit_rejected,
    generation_to_dict,
    report_outcome,
    wait_for_undo_window,
)
from genctl.core.session import GenerationSession, SessionState
from genctl.models.action import CommandOutcome
from genctl.models.generation import Generation, GenerationSource, ProfileType
from genctl.utils.formatting import console
from genctl.utils.shell import CommandResult

SYSTEM = ProfileType.SYSTEM


class StepClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def session(clock: StepClock) -> GenerationSession:
    """A session with generations 40 (current) and 39."""
    source = GenerationSource(SYSTEM, Path("/nix/var/nix/profiles/system"))
    session = GenerationSession({SYSTEM: source}, dry_run=False, clock=clock)
    session.set_generations(
        SYSTEM,
        [
            Generation(40, datetime(2026, 5, 7), is_current=True),
            Generation(39, datetime(2026, 5, 6)),
        ],
    )
    return session


@pytest.fixture
def after_delete(session: GenerationSession) -> GenerationSession:
    """The session right after a real delete of #39."""
    session.request_delete(SYSTEM, [39])
    with (
        patch("genctl.operators.base.run_command") as mock_run,
        patch("genctl.core.session.discover_generations", return_value=[]),
    ):
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)
        session.confirm()
    assert session.state is SessionState.UNDO_PENDING
    return session


class TestGenerationToDict:
    """Tests for generation_to_dict function."""

    def test_fields(self) -> None:
        """Every generation field is serialized."""
        gen = Generation(
            42,
            datetime(2026, 5, 7, 9, 30),
            is_current=True,
            version="24.05",
            kernel_version="6.6.30",
            package_count=812,
            closure_size=1024,
            store_path="/nix/store/abc-nixos-system",
            in_bootloader=True,
        )

        assert generation_to_dict(gen) == {
            "id": 42,
            "date": "2026-05-07T09:30:00",
            "is_current": True,
            "version": "24.05",
            "kernel_version": "6.6.30",
            "package_count": 812,
            "closure_size": 1024,
            "store_path": "/nix/store/abc-nixos-system",
            "is_pinned": False,
            "in_bootloader": True,
        }


class TestConfirmFlow:
    """Tests for confirm_pending, exit_rejected and report_outcome."""

    def test_confirm_with_yes(
        self, session: GenerationSession, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--yes skips the prompt and shows the command."""
        session.dry_run = True
        session.request_delete(SYSTEM, [39])

        outcome = confirm_pending(session, yes=True)

        assert outcome is not None
        assert outcome.message == "Dry run: Would delete 1 generation(s)"
        assert "nix-env --delete-generations 39" in capsys.readouterr().out

    def test_command_kept_on_one_line(
        self,
        session: GenerationSession,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Command text is never wrapped, even in a narrow terminal."""
        monkeypatch.setattr(console, "width", 30)
        session.dry_run = True
        session.request_delete(SYSTEM, [39])

        outcome = confirm_pending(session, yes=True)
        assert outcome is not None
        report_outcome(session, outcome)

        expected = "sudo nix-env --delete-generations 39 --profile /nix/var/nix/profiles/system"
        assert outcome.command == expected
        assert capsys.readouterr().out.count(expected) == 2

    def test_exit_rejected(self, session: GenerationSession) -> None:
        """A rejected request exits with status 1."""
        session.request_delete(SYSTEM, [40])

        with pytest.raises(typer.Exit) as exc_info:
            exit_rejected(session)

        assert exc_info.value.exit_code == 1

    def test_report_failure(self, session: GenerationSession) -> None:
        """A failed outcome exits with status 1."""
        with pytest.raises(typer.Exit) as exc_info:
            report_outcome(session, CommandOutcome(success=False, message="boom"))

        assert exc_info.value.exit_code == 1

    def test_report_undo_message(
        self, after_delete: GenerationSession, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """After a real delete the undo notice text is printed."""
        assert after_delete.last_outcome is not None

        report_outcome(after_delete, after_delete.last_outcome)

        assert "Deleted 1 generation(s)" in capsys.readouterr().out


class TestWaitForUndoWindow:
    """Tests for wait_for_undo_window function."""

    def test_runs_until_expiry(
        self,
        after_delete: GenerationSession,
        clock: StepClock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """The countdown ends once the window has elapsed."""

        def advance(seconds: float) -> None:
            clock.now += 1.0

        with patch("genctl.cli.display.time.sleep", side_effect=advance):
            wait_for_undo_window(after_delete)

        assert after_delete.state is SessionState.IDLE
        assert clock.now >= 10.0
        assert "Action confirmed" in capsys.readouterr().out

    def test_interrupt_closes(
        self, after_delete: GenerationSession, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Ctrl+C closes the notice early."""
        with patch("genctl.cli.display.time.sleep", side_effect=KeyboardInterrupt):
            wait_for_undo_window(after_delete)

        assert after_delete.state is SessionState.IDLE
        assert after_delete.pending_undo is None
        assert "Undo notice closed" in capsys.readouterr().out
