"""Unit tests for the generation diff engine."""

from pathlib import Path

import pytest
from genctl.core.diff import (
    DiffError,
    GenerationDiffer,
    compute_diff,
    is_kernel_package,
    is_security_package,
)
from genctl.models.generation import GenerationSource, Package, ProfileType

OLD = [
    Package("bash", "5.2"),
    Package("linux", "6.6.30"),
    Package("openssl", "3.0.13"),
    Package("nano", "7.2"),
]
NEW = [
    Package("bash", "5.2"),
    Package("linux", "6.8.9"),
    Package("openssl", "3.0.14"),
    Package("ripgrep", "14.1.0"),
]


class TestComputeDiff:
    """Tests for compute_diff function."""

    def test_categories(self) -> None:
        """Packages are classified as added, removed or updated."""
        diff = compute_diff(OLD, NEW)

        assert [p.name for p in diff.added] == ["ripgrep"]
        assert [p.name for p in diff.removed] == ["nano"]
        assert [(u.name, u.old_version, u.new_version) for u in diff.updated] == [
            ("linux", "6.6.30", "6.8.9"),
            ("openssl", "3.0.13", "3.0.14"),
        ]
        assert diff.total_changes == 4
        assert diff.is_empty is False

    def test_flags(self) -> None:
        """Kernel and security updates are flagged."""
        diff = compute_diff(OLD, NEW)

        assert [u.name for u in diff.kernel_updates] == ["linux"]
        assert [u.name for u in diff.security_updates] == ["openssl"]

    def test_identical_is_empty(self) -> None:
        """A set compared with itself has no changes."""
        diff = compute_diff(NEW, NEW)

        assert diff.is_empty is True
        assert diff.total_changes == 0

    def test_swapping_sides_swaps_added_and_removed(self) -> None:
        """diff(b, a) mirrors diff(a, b)."""
        forward = compute_diff(OLD, NEW)
        backward = compute_diff(NEW, OLD)

        assert {p.name for p in forward.added} == {p.name for p in backward.removed}
        assert {p.name for p in forward.removed} == {p.name for p in backward.added}
        assert {(u.name, u.old_version, u.new_version) for u in forward.updated} == {
            (u.name, u.new_version, u.old_version) for u in backward.updated
        }

    def test_versions_compared_literally(self) -> None:
        """Version strings are compared byte-for-byte."""
        diff = compute_diff([Package("vim", "9.1")], [Package("vim", "9.1.0")])

        assert [u.name for u in diff.updated] == ["vim"]

    def test_to_dict(self) -> None:
        """The JSON form carries a summary and the three lists."""
        data = compute_diff(OLD, NEW).to_dict()

        assert data["summary"] == {"added": 1, "removed": 1, "updated": 2, "total": 4}
        assert data["added"] == [{"name": "ripgrep", "version": "14.1.0", "size": 0}]


class TestHeuristics:
    """Tests for the kernel and security name heuristics."""

    @pytest.mark.parametrize("name", ["linux", "linux-firmware", "linux_latest"])
    def test_kernel(self, name: str) -> None:
        """Kernel package names are recognized."""
        assert is_kernel_package(name) is True

    def test_not_kernel(self) -> None:
        """Other names are not kernel packages."""
        assert is_kernel_package("util-linux") is False

    def test_security(self) -> None:
        """Names containing a keyword are security relevant."""
        assert is_security_package("openssh") is True
        assert is_security_package("ripgrep") is False


class TestGenerationDiffer:
    """Tests for GenerationDiffer class."""

    @pytest.fixture
    def tree(self, profile_tree: tuple[Path, Path], generation_factory) -> GenerationSource:
        """A profile with generations 1 and 2."""
        profiles_dir, store_dir = profile_tree
        generation_factory(profiles_dir, store_dir, 1)
        generation_factory(profiles_dir, store_dir, 2)
        return GenerationSource(ProfileType.SYSTEM, profiles_dir / "system")

    def test_compare_uses_loader(self, tree: GenerationSource) -> None:
        """Both generations are loaded through the loader."""
        packages = {1: OLD, 2: NEW}
        calls: list[tuple[Path, float]] = []

        def loader(path: Path, timeout: float) -> list[Package]:
            calls.append((path, timeout))
            return packages[int(path.name.split("-")[1])]

        differ = GenerationDiffer(timeout=4.0, loader=loader)
        diff = differ.compare(tree, 1, tree, 2)

        assert [p.name for p in diff.added] == ["ripgrep"]
        assert calls == [(tree.generation_path(1), 4.0), (tree.generation_path(2), 4.0)]

    def test_missing_generation(self, tree: GenerationSource) -> None:
        """A missing generation raises DiffError."""
        differ = GenerationDiffer(loader=lambda path, timeout: [])

        with pytest.raises(DiffError, match="Generation 9 not found"):
            differ.compare(tree, 1, tree, 9)

    def test_different_profiles_rejected(self, tree: GenerationSource, tmp_path: Path) -> None:
        """Generations of different profiles cannot be compared."""
        other = GenerationSource(ProfileType.HOME_MANAGER, tmp_path / "home-manager")
        differ = GenerationDiffer(loader=lambda path, timeout: [])

        with pytest.raises(DiffError, match="different profiles"):
            differ.compare(tree, 1, other, 2)
