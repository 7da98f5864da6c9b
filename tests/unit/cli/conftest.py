"""Fixtures for CLI command tests."""

from pathlib import Path
from unittest.mock import patch

import pytest
from genctl.core.config import GenctlConfig, save_config
from genctl.models.generation import GenerationSource
from genctl.utils.formatting import console, err_console


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Render CLI output at a fixed width, independent of the terminal."""
    monkeypatch.setattr(console, "width", 200)
    monkeypatch.setattr(err_console, "width", 200)


@pytest.fixture
def nixos(system_source: GenerationSource, tmp_path: Path):
    """Point genctl at a fake profile tree with generations 38-40.

    Closure size queries are disabled and the config file is written to
    the isolated XDG config directory.
    """
    config = GenctlConfig(
        profiles_root=str(system_source.profile_dir),
        boot_root=str(tmp_path / "boot"),
    )
    save_config(config)
    with patch("genctl.core.generations.run_with_timeout", return_value=None):
        yield system_source
