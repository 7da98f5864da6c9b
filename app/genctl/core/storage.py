"""Nix store accounting and cleanup actions.

Builds a :class:`StoreInfo` report (disk usage, every store path with
its size and live/dead status) from bounded external queries, and runs
the garbage-collection and optimisation tools.

Loading never raises: each query that fails or times out simply
contributes nothing. The cleanup actions raise :class:`StoreActionError`.
"""

import logging
import subprocess

from genctl.core.config import GenctlConfig, TimeoutConfig
from genctl.core.paths import STORE_ROOT
from genctl.models.store import (
    CleanAction,
    DiskUsage,
    GcResult,
    OptimiseResult,
    StoreInfo,
    StorePath,
)
from genctl.utils.shell import CommandResult, run_command, run_with_timeout
from genctl.utils.units import to_bytes

logger = logging.getLogger(__name__)

_STORE_PREFIX = STORE_ROOT + "/"

# Store hashes are 32 characters, followed by a dash
_HASH_LENGTH = 32

# Cleanup tools may run for a long time on big stores
_ACTION_TIMEOUT = 3600.0


class StoreActionError(Exception):
    """Raised when a store cleanup tool cannot run or fails."""


def path_to_name(path: str) -> str:
    """Return the readable part of a store path.

    Example:
        >>> path_to_name("/nix/store/" + "a" * 32 + "-firefox-120.0")
        'firefox-120.0'

    Args:
        path: Full store path.

    Returns:
        Name without the store prefix and hash, or the input unchanged
        if it does not look like a store path.
    """
    if not path.startswith(_STORE_PREFIX):
        return path
    rest = path[len(_STORE_PREFIX) :]
    if len(rest) > _HASH_LENGTH + 1 and rest[_HASH_LENGTH] == "-":
        return rest[_HASH_LENGTH + 1 :]
    return path


def parse_df_output(output: str) -> DiskUsage | None:
    """Parse ``df -B1 --output=source,target,size,used,avail,pcent`` output.

    Args:
        output: df stdout (header plus one data line).

    Returns:
        DiskUsage, or None if the data line is missing or short.
    """
    lines = output.splitlines()
    if len(lines) < 2:
        return None
    parts = lines[1].split()
    if len(parts) < 6:
        return None

    def _int(value: str) -> int:
        return int(value) if value.isdigit() else 0

    try:
        percent = float(parts[5].rstrip("%"))
    except ValueError:
        percent = 0.0

    return DiskUsage(
        filesystem=parts[0],
        mount_point=parts[1],
        total=_int(parts[2]),
        used=_int(parts[3]),
        available=_int(parts[4]),
        percent=percent,
    )


def parse_disk_usage(path: str, timeout: float = 10.0) -> DiskUsage | None:
    """Return filesystem usage for the mount holding ``path``.

    Args:
        path: Any path on the filesystem of interest.
        timeout: Seconds df may take.

    Returns:
        DiskUsage, or None on any failure.
    """
    args = ["df", "-B1", "--output=source,target,size,used,avail,pcent", path]
    result = run_with_timeout(args, timeout)
    if result is None or not result.success:
        logger.debug("df unavailable for %s", path)
        return None
    return parse_df_output(result.stdout)


def load_dead_set(timeout: float = 15.0) -> set[str]:
    """Return the store paths that garbage collection would delete.

    Args:
        timeout: Seconds ``nix-store --gc --print-dead`` may take.

    Returns:
        Set of dead store paths (empty on failure or timeout).
    """
    result = run_with_timeout(["nix-store", "--gc", "--print-dead"], timeout)
    if result is None or not result.success:
        logger.debug("Dead path query unavailable, treating all paths as live")
        return set()
    lines = (line.strip() for line in result.stdout.splitlines())
    return {line for line in lines if line.startswith(_STORE_PREFIX)}


def parse_sized_listing(output: str, dead: set[str]) -> list[StorePath]:
    """Parse ``nix path-info --all -S`` output.

    Each line is split at its last whitespace run into path and size;
    an unparseable size becomes 0.

    Args:
        output: Command stdout.
        dead: Dead path set used to classify each path.

    Returns:
        Store paths in output order.
    """
    paths: list[StorePath] = []
    for line in output.splitlines():
        parts = line.strip().rsplit(None, 1)
        if len(parts) != 2:
            continue
        path, size_text = parts[0].strip(), parts[1]
        if not path.startswith(_STORE_PREFIX):
            continue
        size = int(size_text) if size_text.isdigit() else 0
        paths.append(
            StorePath(path=path, name=path_to_name(path), size=size, is_dead=path in dead)
        )
    return paths


def load_paths_with_sizes(dead: set[str], timeout: float = 30.0) -> list[StorePath]:
    """List all store paths with their NAR sizes.

    Args:
        dead: Dead path set.
        timeout: Seconds ``nix path-info --all -S`` may take.

    Returns:
        Store paths, empty on failure or timeout.
    """
    result = run_with_timeout(["nix", "path-info", "--all", "-S"], timeout)
    if result is None or not result.success:
        logger.debug("Sized store listing unavailable")
        return []
    return parse_sized_listing(result.stdout, dead)


def load_paths_without_sizes(dead: set[str], timeout: float = 15.0) -> list[StorePath]:
    """List all store paths without sizes.

    Args:
        dead: Dead path set.
        timeout: Seconds ``nix-store -q --all`` may take.

    Returns:
        Store paths with size 0, empty on failure or timeout.
    """
    result = run_with_timeout(["nix-store", "-q", "--all"], timeout)
    if result is None or not result.success:
        logger.debug("Store path listing unavailable")
        return []

    paths: list[StorePath] = []
    for line in result.stdout.splitlines():
        path = line.strip()
        if path.startswith(_STORE_PREFIX):
            paths.append(StorePath(path=path, name=path_to_name(path), is_dead=path in dead))
    return paths


def load_store_info(config: GenctlConfig | None = None) -> StoreInfo:
    """Build the full store report.

    The store mount entry is dropped when it is on the same filesystem
    as the root. Sizes come from the sized listing; if that yields
    nothing the unsized listing is used and ``has_sizes`` is False.

    Args:
        config: Configuration supplying query timeouts. Defaults apply if None.

    Returns:
        StoreInfo with paths sorted by size, largest first.
    """
    timeouts = config.timeouts if config is not None else TimeoutConfig()

    disk_store = parse_disk_usage(STORE_ROOT)
    disk_root = parse_disk_usage("/")
    if (
        disk_store is not None
        and disk_root is not None
        and disk_store.filesystem == disk_root.filesystem
    ):
        disk_store = None

    dead = load_dead_set(timeouts.dead_paths)

    paths = load_paths_with_sizes(dead, timeouts.sized_listing)
    has_sizes = bool(paths)
    if not has_sizes:
        paths = load_paths_without_sizes(dead, timeouts.path_listing)

    paths.sort(key=lambda p: p.size, reverse=True)

    dead_paths = [p for p in paths if p.is_dead]
    live_paths = [p for p in paths if not p.is_dead]
    dead_size = sum(p.size for p in dead_paths)
    live_size = sum(p.size for p in live_paths)

    logger.debug(
        "Store report: %d paths (%d dead), sizes %s",
        len(paths),
        len(dead_paths),
        "available" if has_sizes else "unavailable",
    )

    return StoreInfo(
        disk_store=disk_store,
        disk_root=disk_root,
        paths=tuple(paths),
        total_paths=len(paths),
        live_paths=len(live_paths),
        dead_paths=len(dead_paths),
        total_size=live_size + dead_size,
        live_size=live_size,
        dead_size=dead_size,
        has_sizes=has_sizes,
    )


def parse_gc_output(text: str) -> tuple[int, int]:
    """Parse ``nix-collect-garbage`` output.

    Looks for "N store paths deleted, X MiB freed".

    Args:
        text: Combined tool output.

    Returns:
        Tuple of (paths removed, bytes freed); zeros if not found.
    """
    paths_removed = 0
    bytes_freed = 0

    for raw_line in text.splitlines():
        line = raw_line.strip().lower()
        if "store paths deleted" in line or "store path deleted" in line:
            first = line.split()[0]
            paths_removed = int(first) if first.isdigit() else 0

        if "freed" in line:
            parts = line.split()
            for i, part in enumerate(parts):
                if part == "freed" and i >= 2:
                    bytes_freed = to_bytes(_float(parts[i - 2]), parts[i - 1])
                    break

    return paths_removed, bytes_freed


def parse_optimise_output(text: str) -> int:
    """Parse ``nix store optimise`` output.

    Looks for "X MiB freed by hard-linking N files".

    Args:
        text: Combined tool output.

    Returns:
        Bytes saved, 0 if not found.
    """
    for raw_line in text.splitlines():
        line = raw_line.strip().lower()
        if "freed" in line and "hard-linking" in line:
            parts = line.split()
            if len(parts) >= 2:
                return to_bytes(_float(parts[0]), parts[1])
    return 0


def _float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _run_action(args: list[str]) -> str:
    """Run a cleanup tool and return its combined output.

    Raises:
        StoreActionError: If the tool cannot be started, times out, or
            exits non-zero.
    """
    logger.info("Running %s", " ".join(args))
    try:
        result: CommandResult = run_command(args, timeout=_ACTION_TIMEOUT)
    except FileNotFoundError as e:
        raise StoreActionError(f"{args[0]} not found") from e
    except OSError as e:
        raise StoreActionError(f"Failed to run {args[0]}: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise StoreActionError(f"{' '.join(args)} did not finish: {e}") from e

    if not result.success:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        raise StoreActionError(f"{' '.join(args)} failed: {detail}")

    return result.stderr + result.stdout


def run_gc() -> GcResult:
    """Delete dead store paths with ``nix-collect-garbage``.

    Raises:
        StoreActionError: If the tool fails.
    """
    text = _run_action(CleanAction.GARBAGE_COLLECT.command)
    paths_removed, bytes_freed = parse_gc_output(text)
    return GcResult(paths_removed=paths_removed, bytes_freed=bytes_freed, output=text)


def run_gc_full() -> GcResult:
    """Delete all old generations and collect garbage (elevated).

    Raises:
        StoreActionError: If the tool fails.
    """
    text = _run_action(CleanAction.FULL_CLEAN.command)
    paths_removed, bytes_freed = parse_gc_output(text)
    return GcResult(paths_removed=paths_removed, bytes_freed=bytes_freed, output=text)


def run_optimise() -> OptimiseResult:
    """Deduplicate store files with ``nix store optimise``.

    Raises:
        StoreActionError: If the tool fails.
    """
    text = _run_action(CleanAction.OPTIMISE.command)
    return OptimiseResult(bytes_saved=parse_optimise_output(text), output=text)


def run_clean_action(action: CleanAction) -> GcResult | OptimiseResult:
    """Run a cleanup action by kind.

    Args:
        action: Action to run.

    Returns:
        GcResult for collections, OptimiseResult for optimisation.

    Raises:
        StoreActionError: If the tool fails.
    """
    if action == CleanAction.GARBAGE_COLLECT:
        return run_gc()
    if action == CleanAction.FULL_CLEAN:
        return run_gc_full()
    return run_optimise()
