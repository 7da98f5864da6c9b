"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. Profile
trees are built under ``tmp_path`` from plain directories (standing in
for store paths) and ``<prefix>-<id>-link`` symlinks.
"""

import os
from pathlib import Path

import pytest
from genctl.models.generation import GenerationSource, ProfileType

HASH = "0123456789abcdfghijklmnpqrsvwxyz"


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config and history files inside the test's temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


def make_generation(
    profiles_dir: Path,
    store_dir: Path,
    gen_id: int,
    *,
    prefix: str = "system",
    version: str | None = None,
    binaries: tuple[str, ...] = (),
    mtime: float | None = None,
) -> Path:
    """Create a fake generation: a store directory and its link.

    Args:
        profiles_dir: Directory holding the generation links.
        store_dir: Directory standing in for /nix/store.
        gen_id: Generation number.
        prefix: Link prefix (``system`` or ``home-manager``).
        version: Content of the version marker file, if any.
        binaries: Names to create under ``sw/bin``.
        mtime: Modification time applied to the link itself.

    Returns:
        Path of the created generation link.
    """
    target = store_dir / f"{HASH}-nixos-system-host-24.05.{gen_id}"
    target.mkdir(parents=True)
    if version is not None:
        marker = "nixos-version" if prefix == "system" else "hm-version"
        (target / marker).write_text(version + "\n")
    if binaries:
        bin_dir = target / "sw" / "bin"
        bin_dir.mkdir(parents=True)
        for name in binaries:
            (bin_dir / name).touch()

    link = profiles_dir / f"{prefix}-{gen_id}-link"
    link.symlink_to(target)
    if mtime is not None:
        os.utime(link, (mtime, mtime), follow_symlinks=False)
    return link


@pytest.fixture
def generation_factory():
    """Expose make_generation to test modules."""
    return make_generation


@pytest.fixture
def profile_tree(tmp_path: Path) -> tuple[Path, Path]:
    """Create empty profiles and store directories.

    Returns:
        Tuple of (profiles_dir, store_dir).
    """
    profiles_dir = tmp_path / "profiles"
    store_dir = tmp_path / "store"
    profiles_dir.mkdir()
    store_dir.mkdir()
    return profiles_dir, store_dir


@pytest.fixture
def system_source(profile_tree: tuple[Path, Path]) -> GenerationSource:
    """A system profile with generations 38, 39 and 40; 40 is current."""
    profiles_dir, store_dir = profile_tree
    for gen_id in (38, 39, 40):
        make_generation(
            profiles_dir,
            store_dir,
            gen_id,
            version=f"24.05.{gen_id}",
            binaries=("bash", "git"),
            mtime=1_700_000_000 + gen_id * 3600,
        )
    (profiles_dir / "system").symlink_to("system-40-link")
    return GenerationSource(ProfileType.SYSTEM, profiles_dir / "system")
