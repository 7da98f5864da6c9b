"""Unit tests for packages command."""

import json
from unittest.mock import patch

import pytest
from genctl.cli.main import app
from genctl.models.generation import GenerationSource, Package
from typer.testing import CliRunner

runner = CliRunner()

PACKAGES = [
    Package("bash", "5.2", 1024),
    Package("firefox", "128.0", 200 * 1024 * 1024),
    Package("firefox-unwrapped", "128.0", 0),
]


@pytest.fixture
def listed():
    """Make package listing return a fixed set."""
    with patch("genctl.cli.commands.packages.get_packages", return_value=PACKAGES) as mock_get:
        yield mock_get


class TestPackagesCommand:
    """Tests for the packages command."""

    def test_table(self, nixos: GenerationSource, listed) -> None:
        """Packages are listed with a count."""
        result = runner.invoke(app, ["packages", "39"])

        assert result.exit_code == 0
        assert "System Generation 39" in result.output
        assert "firefox" in result.output
        assert "3 package(s)" in result.output
        assert listed.call_args[0][0] == nixos.generation_path(39)

    def test_filter_and_json(self, nixos: GenerationSource, listed) -> None:
        """--filter matches names case-insensitively."""
        result = runner.invoke(app, ["packages", "39", "-f", "FIRE", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [
            {"name": "firefox", "version": "128.0", "size": 200 * 1024 * 1024},
            {"name": "firefox-unwrapped", "version": "128.0", "size": 0},
        ]

    def test_missing_generation(self, nixos: GenerationSource, listed) -> None:
        """A missing generation is an error."""
        result = runner.invoke(app, ["packages", "12"])

        assert result.exit_code == 1
        assert "Generation 12 not found" in result.output
        listed.assert_not_called()

    def test_no_packages(self, nixos: GenerationSource) -> None:
        """An unreadable generation prints a notice."""
        with patch("genctl.cli.commands.packages.get_packages", return_value=[]):
            result = runner.invoke(app, ["packages", "40"])

        assert result.exit_code == 0
        assert "No packages found." in result.output
