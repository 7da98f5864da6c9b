"""Diff engine for comparing the package sets of two generations.

This module provides the pure :func:`compute_diff` function and the
:class:`GenerationDiffer` that loads both package lists of a profile
before diffing them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from genctl.core.packages import get_packages
from genctl.models.generation import GenerationSource, Package

logger = logging.getLogger(__name__)

# Package name prefixes that identify kernel packages
KERNEL_PREFIXES: tuple[str, ...] = ("linux-", "linux_")

# Substrings that flag a package as security relevant
SECURITY_KEYWORDS: tuple[str, ...] = (
    "openssl",
    "openssh",
    "gnupg",
    "gpg",
    "sudo",
    "polkit",
    "pam",
    "shadow",
    "nss",
    "ca-certificates",
    "curl",
    "wget",
)


class DiffError(Exception):
    """Raised when two generations cannot be compared."""


@dataclass(frozen=True, slots=True)
class PackageUpdate:
    """A package present in both generations with a different version.

    ``is_kernel`` and ``is_security`` are advisory name heuristics.

    Attributes:
        name: Package name.
        old_version: Version in the older generation.
        new_version: Version in the newer generation.
        is_kernel: Name looks like a kernel package.
        is_security: Name contains a security-relevant keyword.
    """

    name: str
    old_version: str
    new_version: str
    is_kernel: bool = False
    is_security: bool = False


@dataclass(frozen=True, slots=True)
class GenerationDiff:
    """Result of comparing two package sets.

    Attributes:
        added: Packages only in the newer set (newer set order).
        removed: Packages only in the older set (older set order).
        updated: Packages whose version changed (newer set order).
    """

    added: tuple[Package, ...]
    removed: tuple[Package, ...]
    updated: tuple[PackageUpdate, ...]

    @property
    def is_empty(self) -> bool:
        """Check if both package sets are identical."""
        return not (self.added or self.removed or self.updated)

    @property
    def total_changes(self) -> int:
        """Total number of differences found."""
        return len(self.added) + len(self.removed) + len(self.updated)

    @property
    def kernel_updates(self) -> tuple[PackageUpdate, ...]:
        """Updates flagged as kernel packages."""
        return tuple(u for u in self.updated if u.is_kernel)

    @property
    def security_updates(self) -> tuple[PackageUpdate, ...]:
        """Updates flagged as security relevant."""
        return tuple(u for u in self.updated if u.is_security)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the diff.
        """
        return {
            "summary": {
                "added": len(self.added),
                "removed": len(self.removed),
                "updated": len(self.updated),
                "total": self.total_changes,
            },
            "added": [_package_to_dict(p) for p in self.added],
            "removed": [_package_to_dict(p) for p in self.removed],
            "updated": [
                {
                    "name": u.name,
                    "old_version": u.old_version,
                    "new_version": u.new_version,
                    "is_kernel": u.is_kernel,
                    "is_security": u.is_security,
                }
                for u in self.updated
            ],
        }


def _package_to_dict(package: Package) -> dict[str, object]:
    return {"name": package.name, "version": package.version, "size": package.size}


def is_kernel_package(name: str) -> bool:
    """Check if a package name denotes a kernel package."""
    return name == "linux" or name.startswith(KERNEL_PREFIXES)


def is_security_package(name: str) -> bool:
    """Check if a package name contains a security-relevant keyword."""
    return any(keyword in name for keyword in SECURITY_KEYWORDS)


def compute_diff(old: list[Package], new: list[Package]) -> GenerationDiff:
    """Compare two package lists by name.

    Versions are compared byte-for-byte; no semantic ordering is applied.

    Args:
        old: Packages of the older generation.
        new: Packages of the newer generation.

    Returns:
        GenerationDiff with added, removed and updated packages.
    """
    old_by_name = {p.name: p for p in old}
    new_names = {p.name for p in new}

    added: list[Package] = []
    updated: list[PackageUpdate] = []
    for package in new:
        previous = old_by_name.get(package.name)
        if previous is None:
            added.append(package)
        elif previous.version != package.version:
            updated.append(
                PackageUpdate(
                    name=package.name,
                    old_version=previous.version,
                    new_version=package.version,
                    is_kernel=is_kernel_package(package.name),
                    is_security=is_security_package(package.name),
                )
            )

    removed = [p for p in old if p.name not in new_names]

    return GenerationDiff(added=tuple(added), removed=tuple(removed), updated=tuple(updated))


class GenerationDiffer:
    """Loads and compares the package sets of two generations.

    Example:
        >>> differ = GenerationDiffer()
        >>> diff = differ.compare(source, 41, source, 42)
        >>> print(f"{len(diff.added)} added, {len(diff.removed)} removed")

    Args:
        timeout: Timeout for each package listing query.
        loader: Function returning the packages of a generation path.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        loader: Callable[[Path, float], list[Package]] | None = None,
    ) -> None:
        self._timeout = timeout
        self._loader = loader or get_packages

    def load(self, source: GenerationSource, generation_id: int) -> list[Package]:
        """Load the packages of one generation.

        Raises:
            DiffError: If the generation link does not exist.
        """
        gen_path = source.generation_path(generation_id)
        if not (gen_path.exists() or gen_path.is_symlink()):
            msg = f"Generation {generation_id} not found at {gen_path}"
            raise DiffError(msg)
        return self._loader(gen_path, self._timeout)

    def compare(
        self,
        old_source: GenerationSource,
        old_id: int,
        new_source: GenerationSource,
        new_id: int,
    ) -> GenerationDiff:
        """Compare two generations of the same profile.

        Args:
            old_source: Profile of the older generation.
            old_id: Older generation id.
            new_source: Profile of the newer generation.
            new_id: Newer generation id.

        Returns:
            GenerationDiff from old to new.

        Raises:
            DiffError: If the generations belong to different profiles or
                either generation does not exist.
        """
        if old_source != new_source:
            msg = (
                f"Cannot compare generations of different profiles "
                f"({old_source.profile_path} vs {new_source.profile_path})"
            )
            raise DiffError(msg)

        old_packages = self.load(old_source, old_id)
        new_packages = self.load(new_source, new_id)
        logger.debug(
            "Comparing generation %d (%d packages) with %d (%d packages)",
            old_id,
            len(old_packages),
            new_id,
            len(new_packages),
        )
        return compute_diff(old_packages, new_packages)
