"""Data models for genctl.

This module exports the core data structures used throughout the application.
"""

from genctl.models.action import ActionType, CommandOutcome
from genctl.models.generation import Generation, GenerationSource, Package, ProfileType
from genctl.models.history import HistoryEntry, create_history_entry
from genctl.models.store import (
    CleanAction,
    DiskUsage,
    GcResult,
    OptimiseResult,
    StoreInfo,
    StorePath,
)

__all__ = [
    "ActionType",
    "CleanAction",
    "CommandOutcome",
    "DiskUsage",
    "GcResult",
    "Generation",
    "GenerationSource",
    "HistoryEntry",
    "OptimiseResult",
    "Package",
    "ProfileType",
    "StoreInfo",
    "StorePath",
    "create_history_entry",
]
