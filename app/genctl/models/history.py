"""Cleanup history entry model.

This module defines the record written to the storage history file
after every successful store cleanup action.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from genctl.utils.units import format_bytes


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single completed cleanup action.

    The JSON representation uses exactly the four field names below.

    Attributes:
        timestamp: Local time of the action ("YYYY-MM-DD HH:MM").
        action: Human-readable action label (e.g., 'Garbage collection').
        freed_bytes: Bytes reclaimed by the action.
        paths_removed: Store paths deleted (0 for optimisation).
    """

    timestamp: str
    action: str
    freed_bytes: int = 0
    paths_removed: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.action:
            msg = "Action cannot be empty"
            raise ValueError(msg)
        if self.freed_bytes < 0 or self.paths_removed < 0:
            msg = "Freed bytes and removed paths must be non-negative"
            raise ValueError(msg)

    @property
    def freed_human(self) -> str:
        """Return human-readable freed size."""
        return format_bytes(self.freed_bytes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history entry.
        """
        return {
            "timestamp": self.timestamp,
            "action": self.action,
            "freed_bytes": self.freed_bytes,
            "paths_removed": self.paths_removed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing entry data.

        Returns:
            HistoryEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
            TypeError: If numeric fields have the wrong type.
        """
        return cls(
            timestamp=str(data["timestamp"]),
            action=str(data["action"]),
            freed_bytes=int(data.get("freed_bytes", 0)),
            paths_removed=int(data.get("paths_removed", 0)),
        )


def create_history_entry(
    action: str,
    freed_bytes: int,
    paths_removed: int = 0,
    now: datetime | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry stamped with local time.

    Args:
        action: Label of the completed action.
        freed_bytes: Bytes reclaimed.
        paths_removed: Store paths deleted.
        now: Override for the current time (tests).

    Returns:
        New HistoryEntry.
    """
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M")
    return HistoryEntry(
        timestamp=stamp,
        action=action,
        freed_bytes=freed_bytes,
        paths_removed=paths_removed,
    )
