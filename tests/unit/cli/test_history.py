"""Unit tests for history command.

Tests for the CLI history command implementation.
"""

import json

import pytest
from genctl.cli.main import app
from genctl.core.state import HistoryLedger
from genctl.models.history import HistoryEntry
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def recorded() -> list[HistoryEntry]:
    """Write three entries to the isolated history file."""
    ledger = HistoryLedger()
    entries = [
        HistoryEntry("2026-01-24 09:00", "Store optimisation", 1024 * 1024, 0),
        HistoryEntry("2026-01-25 10:00", "Garbage collection", 2 * 1024 * 1024, 40),
        HistoryEntry("2026-01-26 11:30", "Full clean", 4 * 1024 * 1024, 120),
    ]
    for entry in entries:
        ledger.append(entry)
    return entries


class TestHistoryCommand:
    """Tests for the history command."""

    def test_empty(self) -> None:
        """Without history a notice is shown."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found." in result.output

    def test_table(self, recorded: list[HistoryEntry]) -> None:
        """Entries are listed with the summary line."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "Cleanup History" in result.output
        assert "Garbage collection" in result.output
        assert "Last cleanup: 2026-01-26 11:30" in result.output
        assert "Total freed: 7.0 MB" in result.output

    def test_json(self, recorded: list[HistoryEntry]) -> None:
        """JSON output carries the summary and entries, newest first."""
        result = runner.invoke(app, ["history", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["last_cleanup"] == "2026-01-26 11:30"
        assert data["total_freed_bytes"] == 7 * 1024 * 1024
        assert [e["action"] for e in data["entries"]] == [
            "Full clean",
            "Garbage collection",
            "Store optimisation",
        ]

    def test_limit(self, recorded: list[HistoryEntry]) -> None:
        """--limit caps the listed entries."""
        result = runner.invoke(app, ["history", "-n", "1", "--json"])

        assert [e["action"] for e in json.loads(result.stdout)["entries"]] == ["Full clean"]
