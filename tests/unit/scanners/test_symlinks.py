"""Unit tests for the filesystem generation scanner."""

from pathlib import Path

from genctl.models.generation import GenerationSource, ProfileType
from genctl.scanners.base import ScanStatus
from genctl.scanners.symlinks import SymlinkScanner, link_timestamp


class TestSymlinkScanner:
    """Tests for SymlinkScanner class."""

    def test_name(self) -> None:
        """The strategy is called filesystem."""
        assert SymlinkScanner().name == "filesystem"

    def test_finds_generation_links(self, system_source: GenerationSource) -> None:
        """All system-<id>-link entries are reported."""
        outcome = SymlinkScanner().scan(system_source)

        assert outcome.status == ScanStatus.FOUND
        assert sorted(r.id for r in outcome.records) == [38, 39, 40]
        for record in outcome.records:
            assert record.path == system_source.generation_path(record.id)

    def test_ignores_other_entries(
        self, profile_tree: tuple[Path, Path], generation_factory
    ) -> None:
        """Non-matching names and other prefixes are ignored."""
        profiles_dir, store_dir = profile_tree
        generation_factory(profiles_dir, store_dir, 5)
        (profiles_dir / "system-abc-link").touch()
        (profiles_dir / "system-7-link.bak").touch()
        (profiles_dir / "default-3-link").touch()
        source = GenerationSource(ProfileType.SYSTEM, profiles_dir / "system")

        outcome = SymlinkScanner().scan(source)

        assert [r.id for r in outcome.records] == [5]

    def test_home_manager_prefix(self, profile_tree: tuple[Path, Path], generation_factory) -> None:
        """Home-Manager sources match home-manager-<id>-link only."""
        profiles_dir, store_dir = profile_tree
        generation_factory(profiles_dir, store_dir, 1, prefix="system")
        generation_factory(profiles_dir, store_dir, 3, prefix="home-manager")
        source = GenerationSource(ProfileType.HOME_MANAGER, profiles_dir / "home-manager")

        outcome = SymlinkScanner().scan(source)

        assert [r.id for r in outcome.records] == [3]

    def test_empty_directory(self, profile_tree: tuple[Path, Path]) -> None:
        """A readable directory without links is EMPTY."""
        profiles_dir, _ = profile_tree
        source = GenerationSource(ProfileType.SYSTEM, profiles_dir / "system")

        outcome = SymlinkScanner().scan(source)

        assert outcome.status == ScanStatus.EMPTY
        assert outcome.records == ()

    def test_missing_directory_fails(self, tmp_path: Path) -> None:
        """An unreadable directory is FAILED with a reason."""
        source = GenerationSource(ProfileType.SYSTEM, tmp_path / "nope" / "system")

        outcome = SymlinkScanner().scan(source)

        assert outcome.status == ScanStatus.FAILED
        assert outcome.reason is not None
        assert "Cannot read profile directory" in outcome.reason


class TestLinkTimestamp:
    """Tests for link_timestamp function."""

    def test_uses_link_mtime(self, profile_tree: tuple[Path, Path], generation_factory) -> None:
        """The link's own mtime is used."""
        profiles_dir, store_dir = profile_tree
        link = generation_factory(profiles_dir, store_dir, 1, mtime=1_700_000_000)

        stamp = link_timestamp(link)

        assert stamp.timestamp() == 1_700_000_000
        assert stamp.tzinfo is not None

    def test_missing_path_uses_now(self, tmp_path: Path) -> None:
        """A path that cannot be stat'ed falls back to the current time."""
        stamp = link_timestamp(tmp_path / "missing-1-link")

        assert stamp.tzinfo is not None
