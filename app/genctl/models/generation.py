"""Generation and package models.

This module defines the data structures describing Nix profiles, the
numbered generations discovered under them, and the packages a
generation contains.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path

from genctl.utils.units import format_bytes

# Fallback directory when a profile path has no parent component
DEFAULT_PROFILES_DIR = Path("/nix/var/nix/profiles")


class ProfileType(str, Enum):
    """Kind of Nix profile that owns a set of generations.

    Attributes:
        SYSTEM: The NixOS system profile.
        HOME_MANAGER: A per-user Home-Manager profile.
    """

    SYSTEM = "system"
    HOME_MANAGER = "home-manager"

    @property
    def link_prefix(self) -> str:
        """Prefix of generation links (``<prefix>-<id>-link``)."""
        return self.value

    @property
    def label(self) -> str:
        """Human-readable profile name."""
        if self == ProfileType.SYSTEM:
            return "System"
        return "Home-Manager"

    @property
    def version_file(self) -> str:
        """Name of the version marker file inside a generation."""
        if self == ProfileType.SYSTEM:
            return "nixos-version"
        return "hm-version"


@dataclass(frozen=True, slots=True)
class GenerationSource:
    """Identifies the profile whose generations are listed.

    Attributes:
        profile_type: Kind of profile (system or Home-Manager).
        profile_path: The profile symlink, e.g. /nix/var/nix/profiles/system.
    """

    profile_type: ProfileType
    profile_path: Path

    @property
    def profile_dir(self) -> Path:
        """Directory that holds the profile and its generation links."""
        parent = self.profile_path.parent
        if parent == self.profile_path or str(parent) in ("", "."):
            return DEFAULT_PROFILES_DIR
        return parent

    def link_name(self, generation_id: int) -> str:
        """File name of a generation link, e.g. ``system-142-link``."""
        return f"{self.profile_type.link_prefix}-{generation_id}-link"

    def generation_path(self, generation_id: int) -> Path:
        """Absolute path of a generation link."""
        return self.profile_dir / self.link_name(generation_id)


@dataclass(frozen=True, slots=True)
class Generation:
    """A numbered, immutable snapshot of a profile.

    Created by discovery. Only ``is_pinned`` and ``in_bootloader`` are
    overlays; they change through :meth:`with_overlay`, which returns a
    new instance.

    Attributes:
        id: Generation number, unique per profile.
        timestamp: When the generation link was created.
        is_current: Whether the profile currently points at this generation.
        version: NixOS or Home-Manager version label (if known).
        kernel_version: Kernel version (system generations only).
        package_count: Number of installed binaries or manifest entries.
        closure_size: Closure size in bytes (0 if unknown).
        store_path: Store path the generation link resolves to.
        is_pinned: User-level protection flag.
        in_bootloader: Whether a boot entry references this generation.
    """

    id: int
    timestamp: datetime
    is_current: bool = False
    version: str | None = None
    kernel_version: str | None = None
    package_count: int = 0
    closure_size: int = 0
    store_path: str = ""
    is_pinned: bool = False
    in_bootloader: bool = False

    def __post_init__(self) -> None:
        """Validate generation data after initialization."""
        if self.id < 0:
            msg = f"Generation id must be non-negative, got {self.id}"
            raise ValueError(msg)

    def with_overlay(
        self,
        *,
        pinned: bool | None = None,
        in_bootloader: bool | None = None,
    ) -> "Generation":
        """Return a copy with updated overlay flags."""
        return replace(
            self,
            is_pinned=self.is_pinned if pinned is None else pinned,
            in_bootloader=self.in_bootloader if in_bootloader is None else in_bootloader,
        )

    @property
    def formatted_date(self) -> str:
        """Timestamp formatted for display (DD.MM.YY HH:MM)."""
        return self.timestamp.strftime("%d.%m.%y %H:%M")

    @property
    def size_human(self) -> str:
        """Return human-readable closure size, or "-" when unknown."""
        if self.closure_size == 0:
            return "-"
        return format_bytes(self.closure_size)


@dataclass(frozen=True, slots=True)
class Package:
    """A package contained in a generation.

    Identity is the name. A size of 0 means unknown, not empty.

    Attributes:
        name: Package name without version (e.g. 'firefox').
        version: Version string as found in the store path (may be empty).
        size: NAR size in bytes (0 if unknown).
    """

    name: str
    version: str = ""
    size: int = field(default=0)

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        if self.size == 0:
            return "unknown"
        return format_bytes(self.size)
