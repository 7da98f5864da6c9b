"""Mutation models for generation operations.

This module defines the kinds of destructive actions the tool can
perform and the outcome record every execution produces.
"""

from dataclasses import dataclass
from enum import Enum


class ActionType(Enum):
    """Type of mutation awaiting confirmation.

    Attributes:
        RESTORE: Switch a profile to an older generation.
        DELETE: Delete one or more generations.
        GARBAGE_COLLECT: Remove dead store paths.
        OPTIMISE: Deduplicate store files by hard-linking.
        FULL_CLEAN: Delete all old generations, then collect garbage.
    """

    RESTORE = "restore"
    DELETE = "delete"
    GARBAGE_COLLECT = "gc"
    OPTIMISE = "optimise"
    FULL_CLEAN = "full-clean"

    @property
    def is_store_action(self) -> bool:
        """Check if this action operates on the store rather than a profile."""
        return self in (ActionType.GARBAGE_COLLECT, ActionType.OPTIMISE, ActionType.FULL_CLEAN)


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """Result of a restore or delete request.

    Attributes:
        success: Whether the command succeeded (or was only previewed).
        message: Human-readable result or error text.
        command: The full command line that was (or would be) executed.
    """

    success: bool
    message: str
    command: str = ""

    @property
    def failed(self) -> bool:
        """Check if the command failed."""
        return not self.success
