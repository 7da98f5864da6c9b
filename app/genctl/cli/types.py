"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from genctl.core.config import ConfigError, GenctlConfig, load_config
from genctl.core.detect import get_source
from genctl.models.generation import GenerationSource, ProfileType
from genctl.utils.formatting import print_error


class ProfileChoice(str, Enum):
    """Profile selection for listing commands."""

    SYSTEM = "system"
    HOME_MANAGER = "home-manager"
    ALL = "all"

    def profile_types(self) -> list[ProfileType]:
        """Return the profile types covered by this choice."""
        if self == ProfileChoice.ALL:
            return [ProfileType.SYSTEM, ProfileType.HOME_MANAGER]
        return [ProfileType(self.value)]


def load_config_or_exit() -> GenctlConfig:
    """Load the user configuration, exiting with an error message on failure.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_sources(
    choice: ProfileChoice,
    config: GenctlConfig,
) -> dict[ProfileType, GenerationSource]:
    """Resolve the sources for a profile choice.

    A missing Home-Manager profile is silently skipped for ``all``.

    Raises:
        typer.Exit: If a single requested profile is not available.
    """
    sources: dict[ProfileType, GenerationSource] = {}
    for profile in choice.profile_types():
        source = get_source(profile, config.profiles_root_path)
        if source is not None:
            sources[profile] = source
        elif choice != ProfileChoice.ALL:
            print_error(f"{profile.label} profile not found.")
            raise typer.Exit(code=1)
    return sources


def require_source(profile: ProfileType, config: GenctlConfig) -> GenerationSource:
    """Resolve the source of a single profile.

    Raises:
        typer.Exit: If the profile is not available.
    """
    return get_sources(ProfileChoice(profile.value), config)[profile]


def resolve_dry_run(flag: bool, config: GenctlConfig) -> bool:
    """Combine the --dry-run flag with the configured default."""
    return flag or config.dry_run
