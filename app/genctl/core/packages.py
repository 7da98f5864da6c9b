"""Package extraction from generations.

Lists the packages contained in a generation's closure, preferring
``nix path-info`` (which also reports sizes) and falling back to the
generation's ``sw`` tree.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from genctl.core.paths import STORE_ROOT
from genctl.models.generation import Package
from genctl.utils.shell import run_with_timeout

logger = logging.getLogger(__name__)

# Store file names are "<32-char hash>-<name>-<version>"
_HASH_PREFIX_LENGTH = 33

# Version starts at the last "-" followed by a digit
_VERSION_SPLIT_PATTERN = re.compile(r"-(?=\d)")

_MANIFEST_NAME_PATTERN = re.compile(r'^\s*name = "([^"]+)";')

# Build infrastructure and split outputs that are not user-facing packages
_SKIP_PREFIXES: tuple[str, ...] = (
    "bootstrap-",
    "hook-",
    "wrap-",
    "setup-",
    "stdenv-",
    "builder-",
    "source-",
    "raw-",
    "manifest",
    "env-manifest",
    "nix-support",
    "nixos-system-",
)
_SKIP_SUFFIXES: tuple[str, ...] = ("-info", "-man", "-doc", "-dev", "-debug", ".drv")
_SKIP_NAMES: frozenset[str] = frozenset({"source", "builder", "hook", "wrapper"})


def split_name_version(name_version: str) -> tuple[str, str]:
    """Split "<name>-<version>" at the last dash followed by a digit.

    Args:
        name_version: Store file name without the hash prefix.

    Returns:
        Tuple of (name, version); version is empty if none was found.

    Example:
        >>> split_name_version("python3-3.11.9")
        ('python3', '3.11.9')
    """
    matches = list(_VERSION_SPLIT_PATTERN.finditer(name_version))
    if not matches or matches[-1].start() == 0:
        return name_version, ""
    pos = matches[-1].start()
    return name_version[:pos], name_version[pos + 1 :]


def parse_store_path(path: str) -> tuple[str, str] | None:
    """Extract (name, version) from a store path.

    Args:
        path: Full store path or bare store file name.

    Returns:
        Tuple of (name, version), or None if the file name is too short
        to carry a hash prefix.
    """
    filename = path.rstrip("/").rsplit("/", 1)[-1]
    if len(filename) <= _HASH_PREFIX_LENGTH:
        return None
    return split_name_version(filename[_HASH_PREFIX_LENGTH:])


def should_skip_package(name: str) -> bool:
    """Check whether a name belongs to build noise rather than a package."""
    if name in _SKIP_NAMES:
        return True
    return name.startswith(_SKIP_PREFIXES) or name.endswith(_SKIP_SUFFIXES)


def _iter_path_info(data: Any) -> list[tuple[str, int]]:
    """Normalize both ``nix path-info --json`` shapes to (path, narSize) pairs.

    Older Nix prints a list of objects with a ``path`` key; newer Nix
    prints an object keyed by store path.
    """
    pairs: list[tuple[str, int]] = []
    if isinstance(data, dict):
        items = list(data.items())
    elif isinstance(data, list):
        items = [(item.get("path", ""), item) for item in data if isinstance(item, dict)]
    else:
        return pairs

    for path, info in items:
        if not isinstance(path, str) or not path:
            continue
        size = info.get("narSize", 0) if isinstance(info, dict) else 0
        pairs.append((path, size if isinstance(size, int) and size > 0 else 0))
    return pairs


def parse_path_info_json(output: str) -> list[Package]:
    """Parse ``nix path-info -r -s --json`` output into packages.

    Duplicate names keep the entry with the larger NAR size.

    Args:
        output: JSON text.

    Returns:
        Packages in first-seen order (unsorted).

    Raises:
        ValueError: If the output is not valid JSON.
    """
    data = json.loads(output)

    packages: dict[str, Package] = {}
    for path, size in _iter_path_info(data):
        parsed = parse_store_path(path)
        if parsed is None:
            continue
        name, version = parsed
        if should_skip_package(name):
            continue
        existing = packages.get(name)
        if existing is None or existing.size < size:
            packages[name] = Package(name=name, version=version, size=size)
    return list(packages.values())


def _packages_from_path_info(gen_path: Path, timeout: float) -> list[Package]:
    result = run_with_timeout(["nix", "path-info", "-r", "-s", "--json", str(gen_path)], timeout)
    if result is None or not result.success:
        logger.debug("nix path-info unavailable for %s", gen_path)
        return []
    try:
        return parse_path_info_json(result.stdout)
    except ValueError as e:
        logger.debug("Cannot parse nix path-info JSON for %s: %s", gen_path, e)
        return []


def parse_manifest(content: str) -> list[Package]:
    """Parse ``name = "..."`` entries of a profile manifest.nix.

    The values are derivation names, so there is no store hash to strip.

    Args:
        content: manifest.nix text.

    Returns:
        Packages (size unknown) in file order.
    """
    packages: dict[str, Package] = {}
    for line in content.splitlines():
        match = _MANIFEST_NAME_PATTERN.match(line)
        if match is None:
            continue
        name, version = split_name_version(match.group(1))
        if should_skip_package(name) or name in packages:
            continue
        packages[name] = Package(name=name, version=version)
    return list(packages.values())


def _store_component(target: str) -> str | None:
    """Return the "<hash>-<name>" component right below the store root."""
    prefix = STORE_ROOT + "/"
    if not target.startswith(prefix):
        return None
    return target[len(prefix) :].split("/", 1)[0]


def _packages_from_sw(gen_path: Path) -> list[Package]:
    sw_path = gen_path / "sw"

    try:
        return parse_manifest((sw_path / "manifest.nix").read_text(errors="replace"))
    except OSError:
        pass

    bin_path = sw_path / "bin"
    try:
        entries = os.listdir(bin_path)
    except OSError:
        return []

    packages: dict[str, Package] = {}
    for entry in entries:
        try:
            target = os.readlink(bin_path / entry)
        except OSError:
            continue
        component = _store_component(target)
        if component is None:
            continue
        parsed = parse_store_path(component)
        if parsed is None:
            continue
        name, version = parsed
        if name not in packages and not should_skip_package(name):
            packages[name] = Package(name=name, version=version)
    return list(packages.values())


def get_packages(gen_path: Path, timeout: float = 30.0) -> list[Package]:
    """List the packages of a generation.

    Never raises; an unreadable generation yields an empty list.

    Args:
        gen_path: Path of the generation link.
        timeout: Timeout for the ``nix path-info`` query.

    Returns:
        Packages sorted case-insensitively by name.
    """
    packages = _packages_from_path_info(gen_path, timeout)
    if not packages:
        packages = _packages_from_sw(gen_path)

    packages.sort(key=lambda p: p.name.lower())
    logger.debug("Found %d packages in %s", len(packages), gen_path)
    return packages
