"""Profile detection.

Locates the system profile and, if installed, the Home-Manager profile
of the current user.
"""

import logging
import os
from pathlib import Path

from genctl.core.paths import (
    PROFILES_ROOT,
    get_nix_state_hm_profile,
    get_per_user_hm_profile,
    get_standalone_hm_profiles_dir,
)
from genctl.models.generation import GenerationSource, ProfileType

logger = logging.getLogger(__name__)


def current_username() -> str | None:
    """Return the login name from USER or LOGNAME, if set."""
    return os.environ.get("USER") or os.environ.get("LOGNAME") or None


def system_source(profiles_root: Path = PROFILES_ROOT) -> GenerationSource:
    """Return the source for the NixOS system profile.

    Args:
        profiles_root: Root of the system profile tree.

    Returns:
        GenerationSource pointing at <profiles_root>/system.
    """
    return GenerationSource(ProfileType.SYSTEM, profiles_root / "system")


def _has_hm_generation_links(directory: Path) -> bool:
    """Check whether a directory holds ``home-manager-*-link`` entries."""
    try:
        return any(
            name.startswith("home-manager-") and name.endswith("-link")
            for name in os.listdir(directory)
        )
    except OSError:
        return False


def detect_home_manager(
    username: str | None = None,
    profiles_root: Path = PROFILES_ROOT,
) -> GenerationSource | None:
    """Find the Home-Manager profile of a user.

    Locations are tried in order: the standalone state directory (only
    when it holds generation links), the per-user profile written by
    the NixOS module, then the Nix state profile directory.

    Args:
        username: Login name. If None, taken from the environment.
        profiles_root: Root of the system profile tree.

    Returns:
        GenerationSource for the Home-Manager profile, or None if
        Home-Manager does not appear to be installed.
    """
    standalone_dir = get_standalone_hm_profiles_dir()
    if _has_hm_generation_links(standalone_dir):
        logger.debug("Using standalone Home-Manager profiles in %s", standalone_dir)
        return GenerationSource(ProfileType.HOME_MANAGER, standalone_dir / "home-manager")

    user = username or current_username()
    if user:
        per_user = get_per_user_hm_profile(user, profiles_root)
        if per_user.exists() or per_user.is_symlink():
            logger.debug("Using per-user Home-Manager profile %s", per_user)
            return GenerationSource(ProfileType.HOME_MANAGER, per_user)

    nix_state = get_nix_state_hm_profile()
    if nix_state.exists() or nix_state.is_symlink():
        logger.debug("Using Nix state Home-Manager profile %s", nix_state)
        return GenerationSource(ProfileType.HOME_MANAGER, nix_state)

    logger.debug("No Home-Manager profile found")
    return None


def get_source(
    profile: ProfileType,
    profiles_root: Path = PROFILES_ROOT,
) -> GenerationSource | None:
    """Return the source for a profile type, or None if not installed.

    Args:
        profile: Profile type to resolve.
        profiles_root: Root of the system profile tree.

    Returns:
        GenerationSource, or None for a missing Home-Manager profile.
    """
    if profile == ProfileType.SYSTEM:
        return system_source(profiles_root)
    return detect_home_manager(profiles_root=profiles_root)
