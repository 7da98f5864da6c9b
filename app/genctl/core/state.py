"""State management for the cleanup history.

This module provides the HistoryLedger class that persists completed
store cleanup actions as a pretty-printed JSON array, newest first.
"""

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from genctl.core.paths import get_history_path
from genctl.models.history import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class HistoryError(Exception):
    """Raised when the history file cannot be written."""


class HistoryLedger:
    """Manages the cleanup history file.

    Storage location: ~/.local/share/genctl/storage-history.json

    The whole array is rewritten on every append; at most ``limit``
    entries are kept.

    Attributes:
        path: Location of the history file.
        limit: Maximum number of entries kept.
    """

    def __init__(self, path: Path | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Initialize HistoryLedger.

        Args:
            path: Optional override for the history file.
            limit: Maximum number of entries kept.
        """
        self.path = path if path is not None else get_history_path()
        self.limit = limit

    def load(self) -> list[HistoryEntry]:
        """Read all entries, newest first.

        A missing or unparseable file yields an empty list; corrupt
        records are skipped.

        Returns:
            List of HistoryEntry, newest first.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Cannot read history file %s: %s", self.path, e)
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt history file %s: %s", self.path, e)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring history file %s: expected a JSON array", self.path)
            return []

        entries: list[HistoryEntry] = []
        for index, record in enumerate(data):
            try:
                entries.append(HistoryEntry.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping corrupt history record %d: %s", index, e)
        return entries

    def append(self, entry: HistoryEntry) -> None:
        """Record an entry as the newest one.

        Inserts at the front, truncates to ``limit`` and rewrites the
        file atomically, creating parent directories as needed.

        Args:
            entry: The history entry to record.

        Raises:
            HistoryError: If the file cannot be written.
        """
        entries = self.load()
        entries.insert(0, entry)
        del entries[self.limit :]
        self._write(entries)
        logger.debug("Recorded history entry %r (%d kept)", entry.action, len(entries))

    def _write(self, entries: list[HistoryEntry]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HistoryError(f"Cannot create history directory: {e}") from e

        payload = json.dumps([e.to_dict() for e in entries], indent=2)

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(payload)
            os.replace(str(tmp_path), str(self.path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise HistoryError(f"Failed to write history: {e}") from e

    def summary(self) -> tuple[str | None, int]:
        """Summarize the history.

        Returns:
            Tuple of (timestamp of the most recent cleanup or None,
            total bytes freed over all entries).
        """
        return history_summary(self.load())


def history_summary(entries: list[HistoryEntry]) -> tuple[str | None, int]:
    """Summarize a list of entries (newest first).

    Args:
        entries: History entries, newest first.

    Returns:
        Tuple of (first entry's timestamp or None, sum of freed bytes).
    """
    last = entries[0].timestamp if entries else None
    return last, sum(e.freed_bytes for e in entries)
