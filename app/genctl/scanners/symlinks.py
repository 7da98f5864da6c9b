"""Filesystem generation scanner.

Reads the ``<prefix>-<id>-link`` symlinks of a profile directory
directly. Needs no elevated permissions and no Nix tooling.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path

from genctl.models.generation import GenerationSource
from genctl.scanners.base import RawGeneration, ScanOutcome, Scanner

logger = logging.getLogger(__name__)


def link_timestamp(path: Path) -> datetime:
    """Return the creation time of a generation link.

    Uses the symlink's own mtime (lstat), then the target's mtime, then
    the current time.

    Args:
        path: Path of the generation link.

    Returns:
        Local, timezone-aware datetime.
    """
    for stat in (os.lstat, os.stat):
        try:
            return datetime.fromtimestamp(stat(path).st_mtime).astimezone()
        except OSError:
            continue
    logger.debug("No timestamp for %s, using now", path)
    return datetime.now().astimezone()


class SymlinkScanner(Scanner):
    """Scanner that lists generation links in the profile directory."""

    @property
    def name(self) -> str:
        """Return the strategy name."""
        return "filesystem"

    def scan(self, source: GenerationSource) -> ScanOutcome:
        """Scan the profile directory for generation links.

        Args:
            source: Profile to scan.

        Returns:
            FOUND with one record per matching link, EMPTY when none
            match, FAILED when the directory cannot be read.
        """
        profile_dir = source.profile_dir
        pattern = re.compile(rf"^{re.escape(source.profile_type.link_prefix)}-(\d+)-link$")

        try:
            names = os.listdir(profile_dir)
        except OSError as e:
            logger.debug("Cannot read profile directory %s: %s", profile_dir, e)
            return ScanOutcome.failed(f"Cannot read profile directory {profile_dir}: {e}")

        records: list[RawGeneration] = []
        for entry in names:
            match = pattern.match(entry)
            if match is None:
                continue
            gen_path = profile_dir / entry
            records.append(
                RawGeneration(
                    id=int(match.group(1)),
                    timestamp=link_timestamp(gen_path),
                    path=gen_path,
                )
            )

        logger.debug("Found %d generation links in %s", len(records), profile_dir)
        return ScanOutcome.from_records(records)
