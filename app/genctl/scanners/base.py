"""Abstract base class for generation scanners.

This module defines the Scanner interface that both generation
discovery strategies implement, plus the typed outcome they return.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from genctl.models.generation import GenerationSource


class ScanStatus(Enum):
    """Status of a single discovery strategy run.

    Attributes:
        FOUND: At least one generation was found.
        EMPTY: The strategy worked but found nothing.
        FAILED: The strategy could not run (permissions, missing tool, timeout).
    """

    FOUND = "found"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RawGeneration:
    """A generation as found by a scanner, before metadata enrichment.

    Attributes:
        id: Generation number.
        timestamp: Creation time (local, timezone-aware).
        path: Path of the generation link.
    """

    id: int
    timestamp: datetime
    path: Path


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    """Typed result of one discovery strategy.

    Attributes:
        status: FOUND, EMPTY or FAILED.
        records: Discovered generations (empty unless FOUND).
        reason: Why the strategy failed (FAILED only).
    """

    status: ScanStatus
    records: tuple[RawGeneration, ...] = field(default_factory=tuple)
    reason: str | None = None

    @classmethod
    def from_records(cls, records: list[RawGeneration]) -> "ScanOutcome":
        """Build a FOUND or EMPTY outcome from a list of records."""
        if not records:
            return cls(status=ScanStatus.EMPTY)
        return cls(status=ScanStatus.FOUND, records=tuple(records))

    @classmethod
    def failed(cls, reason: str) -> "ScanOutcome":
        """Build a FAILED outcome."""
        return cls(status=ScanStatus.FAILED, reason=reason)

    @property
    def found(self) -> bool:
        """Check if the strategy produced generations."""
        return self.status == ScanStatus.FOUND


class Scanner(ABC):
    """Abstract base class for generation discovery strategies.

    Scanners never raise for unavailable data; they report it through
    a FAILED outcome so the next strategy can take over.

    Example:
        >>> scanner = SymlinkScanner()
        >>> outcome = scanner.scan(source)
        >>> if outcome.found:
        ...     for raw in outcome.records:
        ...         print(raw.id, raw.timestamp)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short strategy name used in log messages."""

    @abstractmethod
    def scan(self, source: GenerationSource) -> ScanOutcome:
        """Discover the generations of a profile.

        Args:
            source: Profile to scan.

        Returns:
            ScanOutcome describing what was found.
        """
