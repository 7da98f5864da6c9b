"""Unit tests for restore command.

Tests for the CLI restore command implementation.
"""

from unittest.mock import patch

from genctl.cli.main import app
from genctl.models.generation import GenerationSource
from genctl.utils.shell import CommandResult
from typer.testing import CliRunner

runner = CliRunner()


class TestRestoreCommand:
    """Tests for the restore command."""

    def test_dry_run(self, nixos: GenerationSource) -> None:
        """--dry-run shows the activation command and runs nothing."""
        with patch("genctl.operators.base.run_command") as mock_run:
            result = runner.invoke(app, ["restore", "39", "--dry-run", "--yes"])

        assert result.exit_code == 0
        assert "Dry run: Would execute restore to generation 39" in result.output
        assert "switch-to-configuration switch" in result.output
        mock_run.assert_not_called()

    def test_confirmed(self, nixos: GenerationSource) -> None:
        """Answering yes runs the command."""
        with patch("genctl.operators.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)
            result = runner.invoke(app, ["restore", "38"], input="y\n")

        assert result.exit_code == 0
        assert "Successfully restore generation 38" in result.output
        args = mock_run.call_args[0][0]
        assert args[0] == "sudo"
        assert args[1] == str(nixos.generation_path(38) / "bin" / "switch-to-configuration")

    def test_declined(self, nixos: GenerationSource) -> None:
        """Answering no cancels."""
        with patch("genctl.operators.base.run_command") as mock_run:
            result = runner.invoke(app, ["restore", "38"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output
        mock_run.assert_not_called()

    def test_current_rejected(self, nixos: GenerationSource) -> None:
        """The current generation cannot be restored."""
        with patch("genctl.operators.base.run_command") as mock_run:
            result = runner.invoke(app, ["restore", "40", "-y"])

        assert result.exit_code == 1
        assert "Cannot restore the current generation" in result.output
        mock_run.assert_not_called()

    def test_unknown_rejected(self, nixos: GenerationSource) -> None:
        """Unknown generations are rejected."""
        result = runner.invoke(app, ["restore", "12", "-y"])

        assert result.exit_code == 1
        assert "Generation 12 not found" in result.output

    def test_failure(self, nixos: GenerationSource) -> None:
        """A failing activation exits with status 1."""
        with patch("genctl.operators.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout="", stderr="sudo: denied", returncode=1)
            result = runner.invoke(app, ["restore", "39", "-y"])

        assert result.exit_code == 1
        assert "sudo: denied" in result.output
