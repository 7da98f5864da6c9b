"""Nix store accounting models.

Data structures for disk usage, individual store paths, the aggregate
store report, and the results of store cleanup actions.
"""

from dataclasses import dataclass, field
from enum import Enum

from genctl.utils.units import format_bytes


@dataclass(frozen=True, slots=True)
class StorePath:
    """A single store path with accounting data.

    ``is_dead`` comes from a separate dead-path scan and is best-effort.

    Attributes:
        path: Full store path (/nix/store/<hash>-<name>).
        name: Path name without the store prefix and hash.
        size: NAR size in bytes (0 if sizes were unavailable).
        is_dead: Whether the path is unreachable from any GC root.
    """

    path: str
    name: str
    size: int = 0
    is_dead: bool = False

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        return format_bytes(self.size)


@dataclass(frozen=True, slots=True)
class DiskUsage:
    """Filesystem usage for one mount point, as reported by ``df``.

    Attributes:
        filesystem: Backing device or filesystem source.
        mount_point: Mount point the queried path lives on.
        total: Total size in bytes.
        used: Used bytes.
        available: Available bytes.
        percent: Usage percentage (0-100).
    """

    filesystem: str
    mount_point: str
    total: int
    used: int
    available: int
    percent: float


@dataclass(frozen=True, slots=True)
class StoreInfo:
    """Snapshot of the whole store.

    When ``has_sizes`` is False every size-bearing field is zero and
    advisory only.

    Attributes:
        disk_store: Usage of the store mount (None if same as root or unknown).
        disk_root: Usage of the root mount (None if unknown).
        paths: Store paths sorted by size, largest first.
        total_paths: Number of paths.
        live_paths: Number of reachable paths.
        dead_paths: Number of reclaimable paths.
        total_size: Sum of all path sizes.
        live_size: Sum of reachable path sizes.
        dead_size: Sum of reclaimable path sizes.
        has_sizes: Whether size data could be obtained at all.
    """

    disk_store: DiskUsage | None = None
    disk_root: DiskUsage | None = None
    paths: tuple[StorePath, ...] = field(default_factory=tuple)
    total_paths: int = 0
    live_paths: int = 0
    dead_paths: int = 0
    total_size: int = 0
    live_size: int = 0
    dead_size: int = 0
    has_sizes: bool = False

    @classmethod
    def empty(cls) -> "StoreInfo":
        """Return the all-zero report used when nothing could be loaded."""
        return cls()

    def filter_paths(self, dead: bool | None = None, query: str = "") -> list[StorePath]:
        """Return paths filtered by liveness and a name substring.

        Args:
            dead: True for dead paths only, False for live only, None for all.
            query: Case-insensitive substring matched against the path name.

        Returns:
            Matching paths in report order.
        """
        needle = query.lower()
        return [
            p
            for p in self.paths
            if (dead is None or p.is_dead == dead) and needle in p.name.lower()
        ]


class CleanAction(str, Enum):
    """Store cleanup actions.

    Attributes:
        GARBAGE_COLLECT: Remove dead store paths (no elevation).
        OPTIMISE: Hard-link identical files (no elevation).
        FULL_CLEAN: Delete old generations of all profiles, then GC (sudo).
    """

    GARBAGE_COLLECT = "gc"
    OPTIMISE = "optimise"
    FULL_CLEAN = "full-clean"

    @property
    def needs_sudo(self) -> bool:
        """Whether the action runs through the elevation wrapper."""
        return self == CleanAction.FULL_CLEAN

    @property
    def command(self) -> list[str]:
        """Argument vector that performs the action."""
        commands = {
            CleanAction.GARBAGE_COLLECT: ["nix-collect-garbage"],
            CleanAction.OPTIMISE: ["nix", "store", "optimise"],
            CleanAction.FULL_CLEAN: ["sudo", "nix-collect-garbage", "-d"],
        }
        return commands[self]

    @property
    def label(self) -> str:
        """Label recorded in the cleanup history."""
        labels = {
            CleanAction.GARBAGE_COLLECT: "Garbage collection",
            CleanAction.OPTIMISE: "Store optimisation",
            CleanAction.FULL_CLEAN: "Full clean",
        }
        return labels[self]


@dataclass(frozen=True, slots=True)
class GcResult:
    """Result of a garbage collection run.

    Attributes:
        paths_removed: Number of store paths deleted.
        bytes_freed: Bytes reclaimed.
        output: Combined stderr and stdout of the tool.
    """

    paths_removed: int
    bytes_freed: int
    output: str = ""


@dataclass(frozen=True, slots=True)
class OptimiseResult:
    """Result of a store optimisation run.

    Attributes:
        bytes_saved: Bytes saved by hard-linking.
        output: Combined stderr and stdout of the tool.
    """

    bytes_saved: int
    output: str = ""
