"""NixOS system profile operator.

Restores and deletes system generations. Both operations need root and
are wrapped in ``sudo``.
"""

from genctl.models.generation import ProfileType
from genctl.operators.base import ProfileOperator


class SystemOperator(ProfileOperator):
    """Operator for the NixOS system profile."""

    @property
    def profile_type(self) -> ProfileType:
        """Return SYSTEM as the profile type."""
        return ProfileType.SYSTEM

    def build_restore_command(self, generation_id: int) -> list[str]:
        """Build ``sudo <gen>/bin/switch-to-configuration switch``."""
        switch = self.source.generation_path(generation_id) / "bin" / "switch-to-configuration"
        return ["sudo", str(switch), "switch"]

    def build_delete_command(self, generation_ids: list[int]) -> list[str]:
        """Build ``sudo nix-env --delete-generations <ids> --profile <path>``."""
        return [
            "sudo",
            "nix-env",
            "--delete-generations",
            *(str(i) for i in generation_ids),
            "--profile",
            str(self.source.profile_path),
        ]
