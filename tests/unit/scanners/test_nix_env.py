"""Unit tests for the nix-env generation scanner."""

from pathlib import Path
from unittest.mock import patch

import pytest
from genctl.models.generation import GenerationSource
from genctl.scanners.base import ScanStatus
from genctl.scanners.nix_env import NixEnvScanner
from genctl.utils.shell import CommandResult

LIST_OUTPUT = """\
  38   2024-05-01 10:22:13
  39   2024-05-03 18:00:00
  40   2024-05-07 09:15:42   (current)
"""


class TestNixEnvScanner:
    """Tests for NixEnvScanner class."""

    @pytest.fixture
    def scanner(self) -> NixEnvScanner:
        """Create NixEnvScanner instance."""
        return NixEnvScanner(timeout=5.0)

    def test_unavailable_fails(
        self, scanner: NixEnvScanner, system_source: GenerationSource
    ) -> None:
        """A missing nix-env is FAILED without running anything."""
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=False),
            patch("genctl.scanners.nix_env.run_with_timeout") as mock_run,
        ):
            outcome = scanner.scan(system_source)

        assert outcome.status == ScanStatus.FAILED
        mock_run.assert_not_called()

    def test_parses_generations(
        self, scanner: NixEnvScanner, system_source: GenerationSource
    ) -> None:
        """Each listed generation with an existing link becomes a record."""
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=True),
            patch("genctl.scanners.nix_env.run_with_timeout") as mock_run,
        ):
            mock_run.return_value = CommandResult(stdout=LIST_OUTPUT, stderr="", returncode=0)
            outcome = scanner.scan(system_source)

        assert outcome.status == ScanStatus.FOUND
        assert [r.id for r in outcome.records] == [38, 39, 40]
        first = outcome.records[0]
        assert (first.timestamp.year, first.timestamp.month, first.timestamp.day) == (2024, 5, 1)
        assert first.timestamp.hour == 10
        assert first.timestamp.tzinfo is not None

        args = mock_run.call_args[0][0]
        assert args == [
            "nix-env",
            "--list-generations",
            "--profile",
            str(system_source.profile_path),
        ]
        assert mock_run.call_args[0][1] == 5.0

    def test_skips_missing_links(
        self, scanner: NixEnvScanner, system_source: GenerationSource
    ) -> None:
        """Generations whose link does not exist are dropped."""
        output = LIST_OUTPUT + "  41   2024-05-09 09:00:00\n"
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=True),
            patch("genctl.scanners.nix_env.run_with_timeout") as mock_run,
        ):
            mock_run.return_value = CommandResult(stdout=output, stderr="", returncode=0)
            outcome = scanner.scan(system_source)

        assert 41 not in [r.id for r in outcome.records]

    def test_skips_malformed_lines(self, scanner: NixEnvScanner, tmp_path: Path) -> None:
        """Blank and malformed lines are ignored."""
        assert scanner._parse_line("") is None
        assert scanner._parse_line("   ") is None
        assert scanner._parse_line("abc 2024-05-01 10:22:13") is None
        assert scanner._parse_line("38 2024-13-01 10:22:13") is None
        parsed = scanner._parse_line("  38   2024-05-01 10:22:13   (current)")
        assert parsed is not None
        assert parsed[0] == 38

    def test_timeout_fails(self, scanner: NixEnvScanner, system_source: GenerationSource) -> None:
        """A timed-out query is FAILED."""
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=True),
            patch("genctl.scanners.nix_env.run_with_timeout", return_value=None),
        ):
            outcome = scanner.scan(system_source)

        assert outcome.status == ScanStatus.FAILED
        assert outcome.reason is not None
        assert "timed out" in outcome.reason

    def test_nonzero_exit_fails(
        self, scanner: NixEnvScanner, system_source: GenerationSource
    ) -> None:
        """A failing nix-env is FAILED with its stderr."""
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=True),
            patch("genctl.scanners.nix_env.run_with_timeout") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout="", stderr="error: permission denied", returncode=1
            )
            outcome = scanner.scan(system_source)

        assert outcome.status == ScanStatus.FAILED
        assert outcome.reason is not None
        assert "permission denied" in outcome.reason

    def test_empty_listing(self, scanner: NixEnvScanner, system_source: GenerationSource) -> None:
        """A successful call with no generations is EMPTY."""
        with (
            patch("genctl.scanners.nix_env.command_exists", return_value=True),
            patch("genctl.scanners.nix_env.run_with_timeout") as mock_run,
        ):
            mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)
            outcome = scanner.scan(system_source)

        assert outcome.status == ScanStatus.EMPTY
