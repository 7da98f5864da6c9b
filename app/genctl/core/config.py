"""genctl configuration and settings.

This module provides the configuration model and I/O functions for
genctl: dry-run default, profile/boot locations, process timeouts,
the undo window, the history cap, and the initial pin overlay.

Configuration is stored in ~/.config/genctl/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from genctl.core.paths import get_config_path
from genctl.models.generation import ProfileType

logger = logging.getLogger(__name__)

# Timeout in seconds for a single external tool call
TimeoutSeconds = Annotated[int, Field(ge=1, le=600)]


class TimeoutConfig(BaseModel):
    """Per-query timeouts in seconds for external Nix tools.

    Attributes:
        dead_paths: ``nix-store --gc --print-dead``.
        path_listing: ``nix-store -q --all``.
        sized_listing: ``nix path-info --all -S``.
        closure_size: ``nix path-info -S <generation>``.
        generation_listing: ``nix-env --list-generations``.
        package_listing: ``nix path-info -r -s --json <generation>``.
    """

    model_config = ConfigDict(extra="forbid")

    dead_paths: TimeoutSeconds = 15
    path_listing: TimeoutSeconds = 15
    sized_listing: TimeoutSeconds = 30
    closure_size: TimeoutSeconds = 10
    generation_listing: TimeoutSeconds = 15
    package_listing: TimeoutSeconds = 30


class PinnedConfig(BaseModel):
    """Generation ids pinned by the user, per profile.

    Pins are a user-level overlay; the Nix store knows nothing about them.
    """

    model_config = ConfigDict(extra="forbid")

    system: list[Annotated[int, Field(ge=0)]] = Field(default_factory=list)
    home_manager: list[Annotated[int, Field(ge=0)]] = Field(default_factory=list)

    def for_profile(self, profile: ProfileType) -> set[int]:
        """Return the pinned ids of a profile as a set."""
        if profile == ProfileType.SYSTEM:
            return set(self.system)
        return set(self.home_manager)


class GenctlConfig(BaseModel):
    """Top-level genctl configuration.

    Attributes:
        dry_run: Default dry-run mode for restore/delete.
        profiles_root: Directory holding the system profile links.
        boot_root: Mount point of the boot partition (bootloader scan).
        undo_seconds: Length of the undo notice window after a delete.
        history_limit: Maximum number of cleanup history entries kept.
        timeouts: Per-query external tool timeouts.
        pinned: Initial pin overlay.
    """

    model_config = ConfigDict(extra="forbid")

    dry_run: bool = False
    profiles_root: Annotated[
        str,
        Field(min_length=1, description="Root of the Nix profile tree"),
    ] = "/nix/var/nix/profiles"
    boot_root: Annotated[
        str,
        Field(min_length=1, description="Boot partition mount point"),
    ] = "/boot"
    undo_seconds: Annotated[
        int,
        Field(ge=1, le=60, description="Undo notice window in seconds (1-60)"),
    ] = 10
    history_limit: Annotated[
        int,
        Field(ge=1, le=1000, description="Cleanup history cap (1-1000)"),
    ] = 100
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    pinned: PinnedConfig = Field(default_factory=PinnedConfig)

    @property
    def profiles_root_path(self) -> Path:
        """Profiles root as a Path."""
        return Path(self.profiles_root)

    @property
    def boot_root_path(self) -> Path:
        """Boot root as a Path."""
        return Path(self.boot_root)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content doesn't match the schema."""


def load_config(path: Path | None = None) -> GenctlConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: the defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated GenctlConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return GenctlConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return GenctlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: GenctlConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The GenctlConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Cannot create config directory: {e}") from e

    data = config.model_dump(mode="python")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def set_pinned(
    config: GenctlConfig,
    profile: ProfileType,
    generation_id: int,
    pinned: bool,
) -> GenctlConfig:
    """Return a copy of the config with one generation (un)pinned.

    Args:
        config: Current configuration.
        profile: Profile the generation belongs to.
        generation_id: Generation to pin or unpin.
        pinned: True to pin, False to unpin.

    Returns:
        New GenctlConfig with the updated pin overlay.
    """
    ids = config.pinned.for_profile(profile)
    if pinned:
        ids.add(generation_id)
    else:
        ids.discard(generation_id)

    field = "system" if profile == ProfileType.SYSTEM else "home_manager"
    new_pinned = config.pinned.model_copy(update={field: sorted(ids)})
    return config.model_copy(update={"pinned": new_pinned})
