"""XDG-compliant path management for genctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and persistent data, plus the fixed
locations of the Nix profile tree.

XDG defaults:
- Config: ~/.config/genctl/
- Data: ~/.local/share/genctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "genctl"

# Root of the system-wide Nix profile tree
PROFILES_ROOT = Path("/nix/var/nix/profiles")

# Nix store location
STORE_ROOT = "/nix/store"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/genctl/ (or XDG_CONFIG_HOME/genctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Get the data directory path.

    Holds the cleanup history, which should survive across runs.

    Returns:
        Path to ~/.local/share/genctl/ (or XDG_DATA_HOME/genctl/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the main configuration file path.

    Returns:
        Path to ~/.config/genctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override file path.

    Returns:
        Path to ~/.config/genctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_history_path() -> Path:
    """Get the cleanup history file path.

    Returns:
        Path to ~/.local/share/genctl/storage-history.json.
    """
    return get_data_dir() / "storage-history.json"


# =============================================================================
# Home-Manager profile locations
# =============================================================================


def get_standalone_hm_profiles_dir() -> Path:
    """Get the standalone Home-Manager profiles directory.

    Returns:
        Path to ~/.local/state/home-manager/profiles.
    """
    return Path.home() / ".local" / "state" / "home-manager" / "profiles"


def get_per_user_hm_profile(username: str, profiles_root: Path = PROFILES_ROOT) -> Path:
    """Get the NixOS-module Home-Manager profile for a user.

    Args:
        username: Login name of the user.
        profiles_root: Root of the system profile tree.

    Returns:
        Path to <profiles_root>/per-user/<username>/home-manager.
    """
    return profiles_root / "per-user" / username / "home-manager"


def get_nix_state_hm_profile() -> Path:
    """Get the Home-Manager profile under the user's Nix state directory.

    Returns:
        Path to ~/.local/state/nix/profiles/home-manager.
    """
    return Path.home() / ".local" / "state" / "nix" / "profiles" / "home-manager"
