"""Home-Manager profile operator.

Restores a Home-Manager generation through its ``activate`` script and
deletes generations with ``home-manager remove-generations``, falling
back to plain ``nix-env`` where those are unavailable. No elevation.
"""

from genctl.models.generation import ProfileType
from genctl.operators.base import ProfileOperator
from genctl.utils.shell import command_exists


class HomeManagerOperator(ProfileOperator):
    """Operator for a user's Home-Manager profile."""

    @property
    def profile_type(self) -> ProfileType:
        """Return HOME_MANAGER as the profile type."""
        return ProfileType.HOME_MANAGER

    def build_restore_command(self, generation_id: int) -> list[str]:
        """Build ``<gen>/activate``, or a nix-env generation switch."""
        gen_path = self.source.generation_path(generation_id)
        if gen_path.exists():
            return [str(gen_path / "activate")]
        return [
            "nix-env",
            "--switch-generation",
            str(generation_id),
            "--profile",
            str(self.source.profile_path),
        ]

    def build_delete_command(self, generation_ids: list[int]) -> list[str]:
        """Build ``home-manager remove-generations <ids>`` or the nix-env equivalent."""
        ids = [str(i) for i in generation_ids]
        if command_exists("home-manager"):
            return ["home-manager", "remove-generations", *ids]
        return [
            "nix-env",
            "--delete-generations",
            *ids,
            "--profile",
            str(self.source.profile_path),
        ]
