"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths
and the Home-Manager profile locations.
"""

import os
from pathlib import Path
from unittest.mock import patch

from genctl.core.paths import (
    APP_NAME,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_history_path,
    get_nix_state_hm_profile,
    get_per_user_hm_profile,
    get_standalone_hm_profiles_dir,
    get_theme_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_config_dir()
            expected = Path.home() / ".config" / APP_NAME

        assert result == expected

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME

    def test_empty_xdg_value_ignored(self) -> None:
        """An empty XDG_CONFIG_HOME falls back to the default."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": ""}):
            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME


class TestGetDataDir:
    """Tests for get_data_dir function."""

    def test_default_data_dir(self) -> None:
        """get_data_dir returns default path when XDG_DATA_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_data_dir()
            expected = Path.home() / ".local" / "share" / APP_NAME

        assert result == expected

    def test_respects_xdg_data_home(self, tmp_path: Path) -> None:
        """get_data_dir respects XDG_DATA_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_DATA_HOME": str(tmp_path)}):
            result = get_data_dir()

        assert result == tmp_path / APP_NAME


class TestFilePaths:
    """Tests for the individual file locations."""

    def test_config_path(self, tmp_path: Path) -> None:
        """config.toml lives in the config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert get_config_path() == tmp_path / APP_NAME / "config.toml"

    def test_theme_path(self, tmp_path: Path) -> None:
        """theme.toml lives in the config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert get_theme_path() == tmp_path / APP_NAME / "theme.toml"

    def test_history_path(self, tmp_path: Path) -> None:
        """The cleanup history lives in the data directory."""
        with patch.dict(os.environ, {"XDG_DATA_HOME": str(tmp_path)}):
            assert get_history_path() == tmp_path / APP_NAME / "storage-history.json"


class TestHomeManagerLocations:
    """Tests for the Home-Manager profile locations."""

    def test_standalone(self, tmp_path: Path) -> None:
        """The standalone directory is under ~/.local/state."""
        with patch("genctl.core.paths.Path.home", return_value=tmp_path):
            result = get_standalone_hm_profiles_dir()

        assert result == tmp_path / ".local" / "state" / "home-manager" / "profiles"

    def test_per_user(self) -> None:
        """The per-user profile is under the profiles root."""
        result = get_per_user_hm_profile("alice")

        assert result == Path("/nix/var/nix/profiles/per-user/alice/home-manager")

    def test_per_user_custom_root(self, tmp_path: Path) -> None:
        """A custom profiles root is honored."""
        assert get_per_user_hm_profile("bob", tmp_path) == tmp_path / "per-user/bob/home-manager"

    def test_nix_state(self, tmp_path: Path) -> None:
        """The Nix state profile is under ~/.local/state/nix."""
        with patch("genctl.core.paths.Path.home", return_value=tmp_path):
            result = get_nix_state_hm_profile()

        assert result == tmp_path / ".local" / "state" / "nix" / "profiles" / "home-manager"
