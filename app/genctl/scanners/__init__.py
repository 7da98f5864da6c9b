"""Generation discovery strategies.

This module exports the scanner classes used to enumerate the
generations of a Nix profile.
"""

from genctl.scanners.base import RawGeneration, ScanOutcome, Scanner, ScanStatus
from genctl.scanners.nix_env import NixEnvScanner
from genctl.scanners.symlinks import SymlinkScanner

__all__ = [
    "NixEnvScanner",
    "RawGeneration",
    "ScanOutcome",
    "ScanStatus",
    "Scanner",
    "SymlinkScanner",
]
