"""Profile operators for restoring and deleting generations.

This module provides the abstract operator interface and one concrete
operator per profile type (NixOS system, Home-Manager).
"""

from genctl.models.generation import GenerationSource, ProfileType
from genctl.operators.base import ProfileOperator
from genctl.operators.home_manager import HomeManagerOperator
from genctl.operators.system import SystemOperator


def get_operator(source: GenerationSource, dry_run: bool = False) -> ProfileOperator:
    """Return the operator for a source's profile type.

    Args:
        source: Profile to operate on.
        dry_run: If True, only simulate actions.

    Returns:
        SystemOperator or HomeManagerOperator.
    """
    if source.profile_type == ProfileType.SYSTEM:
        return SystemOperator(source, dry_run=dry_run)
    return HomeManagerOperator(source, dry_run=dry_run)


__all__ = ["HomeManagerOperator", "ProfileOperator", "SystemOperator", "get_operator"]
