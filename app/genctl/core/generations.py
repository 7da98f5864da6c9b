"""Generation discovery and metadata enrichment.

Runs the discovery strategies in order (filesystem links first, then
``nix-env``) and turns each raw record into a fully described
:class:`Generation`. Every lookup here is best effort: unavailable data
degrades to None or 0 and is logged, never raised.
"""

import logging
import os
import re
from pathlib import Path

from genctl.models.generation import Generation, GenerationSource, ProfileType
from genctl.scanners.base import RawGeneration, ScanOutcome, Scanner
from genctl.scanners.nix_env import NixEnvScanner
from genctl.scanners.symlinks import SymlinkScanner
from genctl.utils.shell import run_with_timeout

logger = logging.getLogger(__name__)

# "<name>-<id>-link"
_LINK_ID_PATTERN = re.compile(r"-(\d+)-link$")

# Marker inside the store path of a system closure
_SYSTEM_MARKER = "-nixos-system-"

# "<32-char hash>-" prefix of a store path component
_STORE_HASH_PATTERN = re.compile(r"^[0-9a-z]{32}-")

# "nixos-generation-<id>.conf" (systemd-boot)
_SYSTEMD_BOOT_PATTERN = re.compile(r"^nixos-generation-(\d+)\.conf$")

# "... NixOS ... Generation <id> ..." (GRUB)
_GRUB_GENERATION_PATTERN = re.compile(r"Generation (\d+)")


def read_current_id(profile_path: Path) -> int | None:
    """Return the generation the profile symlink points at.

    Args:
        profile_path: Profile symlink (e.g. /nix/var/nix/profiles/system).

    Returns:
        The id parsed from the ``<name>-<id>-link`` target, or None.
    """
    try:
        target = os.readlink(profile_path)
    except OSError as e:
        logger.debug("Cannot read profile link %s: %s", profile_path, e)
        return None

    match = _LINK_ID_PATTERN.search(os.path.basename(target))
    if match is None:
        logger.debug("Profile link %s has unexpected target %s", profile_path, target)
        return None
    return int(match.group(1))


def read_boot_entries(boot_root: Path = Path("/boot")) -> set[int]:
    """Return the generation ids referenced by the bootloader.

    systemd-boot entry files are checked first; GRUB's config is only
    consulted when no systemd-boot entries were found.

    Args:
        boot_root: Mount point of the boot partition.

    Returns:
        Set of generation ids (empty if nothing could be read).
    """
    entries: set[int] = set()

    try:
        for name in os.listdir(boot_root / "loader" / "entries"):
            match = _SYSTEMD_BOOT_PATTERN.match(name)
            if match:
                entries.add(int(match.group(1)))
    except OSError:
        pass

    if entries:
        return entries

    grub_cfg = boot_root / "grub" / "grub.cfg"
    try:
        content = grub_cfg.read_text(errors="replace")
    except OSError:
        return entries

    for line in content.splitlines():
        if "NixOS" not in line:
            continue
        match = _GRUB_GENERATION_PATTERN.search(line)
        if match:
            entries.add(int(match.group(1)))
    return entries


def _strip_store_hash(component: str) -> str:
    return _STORE_HASH_PATTERN.sub("", component, count=1)


def read_version(gen_path: Path, profile_type: ProfileType, store_path: str = "") -> str | None:
    """Return the NixOS or Home-Manager version of a generation.

    Reads the version marker file; for system generations without one,
    the version is taken from the ``-nixos-system-<host>-<version>``
    store path.

    Args:
        gen_path: Path of the generation link.
        profile_type: Owning profile type.
        store_path: Resolved store path of the link.

    Returns:
        Version string, or None if unknown.
    """
    version_file = gen_path / profile_type.version_file
    try:
        version = version_file.read_text().strip()
        if version:
            return version
    except OSError:
        pass

    idx = store_path.find(_SYSTEM_MARKER)
    if idx == -1:
        return None
    parts = store_path[idx + len(_SYSTEM_MARKER) :].split("-")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def read_kernel_version(gen_path: Path) -> str | None:
    """Return the kernel version of a system generation.

    Args:
        gen_path: Path of the generation link.

    Returns:
        Version from the ``kernel`` link target's ``linux-<ver>``
        component, else the first directory under
        ``kernel-modules/lib/modules``, else None.
    """
    try:
        target = os.readlink(gen_path / "kernel")
    except OSError:
        target = None

    if target is not None:
        for component in target.split("/"):
            name = _strip_store_hash(component)
            if name.startswith("linux-") and len(name) > len("linux-"):
                return name[len("linux-") :].split("-")[0]
        return None

    modules_dir = gen_path / "kernel-modules" / "lib" / "modules"
    try:
        names = sorted(os.listdir(modules_dir))
    except OSError:
        return None
    return names[0] if names else None


def count_packages(gen_path: Path) -> int:
    """Count the packages of a generation.

    Counts entries in ``sw/bin`` (system), else ``name = `` occurrences
    in the Home-Manager profile manifest.

    Args:
        gen_path: Path of the generation link.

    Returns:
        Package count, 0 if unknown.
    """
    try:
        return len(os.listdir(gen_path / "sw" / "bin"))
    except OSError:
        pass

    manifest = gen_path / "home-files" / ".nix-profile" / "manifest.nix"
    try:
        return manifest.read_text(errors="replace").count("name = ")
    except OSError:
        return 0


def read_closure_size(gen_path: Path, timeout: float = 10.0) -> int:
    """Return the closure size of a generation via ``nix path-info -S``.

    Args:
        gen_path: Path of the generation link.
        timeout: Seconds the query may take.

    Returns:
        Size in bytes, or 0 on any failure.
    """
    result = run_with_timeout(["nix", "path-info", "-S", str(gen_path)], timeout)
    if result is None or not result.success:
        return 0

    for line in result.stdout.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[1].isdigit():
            return int(parts[1])
    return 0


def enrich_generation(
    raw: RawGeneration,
    profile_type: ProfileType,
    *,
    current_id: int | None,
    boot_ids: set[int],
    pinned_ids: set[int],
    closure_timeout: float = 10.0,
) -> Generation:
    """Build a Generation from a raw scanner record.

    Args:
        raw: Record produced by a scanner.
        profile_type: Owning profile type.
        current_id: Id the profile currently points at.
        boot_ids: Ids referenced by the bootloader.
        pinned_ids: Ids pinned by the user.
        closure_timeout: Timeout for the closure size query.

    Returns:
        Fully populated Generation.
    """
    try:
        store_path = os.readlink(raw.path)
    except OSError:
        store_path = ""

    kernel = read_kernel_version(raw.path) if profile_type == ProfileType.SYSTEM else None

    return Generation(
        id=raw.id,
        timestamp=raw.timestamp,
        is_current=raw.id == current_id,
        version=read_version(raw.path, profile_type, store_path),
        kernel_version=kernel,
        package_count=count_packages(raw.path),
        closure_size=read_closure_size(raw.path, closure_timeout),
        store_path=store_path,
        is_pinned=raw.id in pinned_ids,
        in_bootloader=raw.id in boot_ids,
    )


def scan_with_fallback(source: GenerationSource, scanners: list[Scanner]) -> ScanOutcome:
    """Run discovery strategies until one finds generations.

    Args:
        source: Profile to scan.
        scanners: Strategies in priority order.

    Returns:
        The first FOUND outcome, else the outcome of the last strategy.
    """
    outcome = ScanOutcome.from_records([])
    for scanner in scanners:
        outcome = scanner.scan(source)
        if outcome.found:
            logger.debug(
                "%s strategy found %d generations for %s",
                scanner.name,
                len(outcome.records),
                source.profile_path,
            )
            return outcome
        logger.debug(
            "%s strategy %s for %s%s",
            scanner.name,
            outcome.status.value,
            source.profile_path,
            f": {outcome.reason}" if outcome.reason else "",
        )
    return outcome


def discover_generations(
    source: GenerationSource,
    *,
    boot_root: Path = Path("/boot"),
    pinned_ids: set[int] | None = None,
    listing_timeout: float = 15.0,
    closure_timeout: float = 10.0,
    scanners: list[Scanner] | None = None,
) -> list[Generation]:
    """List and describe all generations of a profile.

    Never raises: when both strategies fail the result is empty.

    Args:
        source: Profile to list.
        boot_root: Mount point of the boot partition.
        pinned_ids: Ids to mark as pinned.
        listing_timeout: Timeout for ``nix-env --list-generations``.
        closure_timeout: Timeout for each closure size query.
        scanners: Override the discovery strategies (tests).

    Returns:
        Generations sorted by id, newest first.
    """
    strategies = scanners or [SymlinkScanner(), NixEnvScanner(timeout=listing_timeout)]
    outcome = scan_with_fallback(source, strategies)
    if not outcome.found:
        logger.warning("No generations found for %s", source.profile_path)
        return []

    current_id = read_current_id(source.profile_path)
    boot_ids = read_boot_entries(boot_root) if source.profile_type == ProfileType.SYSTEM else set()

    generations = [
        enrich_generation(
            raw,
            source.profile_type,
            current_id=current_id,
            boot_ids=boot_ids,
            pinned_ids=pinned_ids or set(),
            closure_timeout=closure_timeout,
        )
        for raw in outcome.records
    ]
    generations.sort(key=lambda g: g.id, reverse=True)
    return generations
