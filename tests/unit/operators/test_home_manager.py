"""Unit tests for HomeManagerOperator."""

from pathlib import Path
from unittest.mock import patch

from genctl.models.generation import GenerationSource, ProfileType
from genctl.operators.home_manager import HomeManagerOperator


class TestHomeManagerOperator:
    """Tests for HomeManagerOperator class."""

    def test_restore_uses_activate(self, tmp_path: Path) -> None:
        """An existing generation is activated through its script."""
        (tmp_path / "home-manager-7-link").mkdir()
        source = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")

        command = HomeManagerOperator(source).build_restore_command(7)

        assert command == [str(tmp_path / "home-manager-7-link" / "activate")]

    def test_restore_falls_back_to_nix_env(self, tmp_path: Path) -> None:
        """A missing generation link switches through nix-env."""
        source = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")

        command = HomeManagerOperator(source).build_restore_command(7)

        assert command == [
            "nix-env",
            "--switch-generation",
            "7",
            "--profile",
            str(tmp_path / "home-manager"),
        ]

    def test_delete_with_home_manager(self, tmp_path: Path) -> None:
        """home-manager remove-generations is used when installed."""
        source = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")

        with patch("genctl.operators.home_manager.command_exists", return_value=True):
            command = HomeManagerOperator(source).build_delete_command([3, 4])

        assert command == ["home-manager", "remove-generations", "3", "4"]

    def test_delete_without_home_manager(self, tmp_path: Path) -> None:
        """nix-env is used when home-manager is not installed."""
        source = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")

        with patch("genctl.operators.home_manager.command_exists", return_value=False):
            command = HomeManagerOperator(source).build_delete_command([3])

        assert command == [
            "nix-env",
            "--delete-generations",
            "3",
            "--profile",
            str(tmp_path / "home-manager"),
        ]

    def test_no_sudo(self, tmp_path: Path) -> None:
        """Home-Manager commands never run elevated."""
        source = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")

        with patch("genctl.operators.home_manager.command_exists", return_value=True):
            preview = HomeManagerOperator(source, dry_run=True).preview_delete([1])

        assert "sudo" not in preview
