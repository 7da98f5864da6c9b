"""nix-env generation scanner.

Fallback strategy that asks ``nix-env --list-generations`` for the
generations of a profile. Used when the profile directory cannot be
listed or holds no generation links.
"""

import logging
from datetime import datetime

from genctl.models.generation import GenerationSource
from genctl.scanners.base import RawGeneration, ScanOutcome, Scanner
from genctl.utils.shell import command_exists, run_with_timeout

logger = logging.getLogger(__name__)

# nix-env prints "  142   2024-05-01 10:22:13   (current)"
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class NixEnvScanner(Scanner):
    """Scanner backed by ``nix-env --list-generations``.

    Args:
        timeout: Seconds the nix-env call may take before it is killed.
    """

    def __init__(self, timeout: float = 15.0) -> None:
        self._timeout = timeout

    @property
    def name(self) -> str:
        """Return the strategy name."""
        return "nix-env"

    def is_available(self) -> bool:
        """Check if nix-env is available."""
        return command_exists("nix-env")

    def scan(self, source: GenerationSource) -> ScanOutcome:
        """List generations through nix-env.

        Records whose generation link does not exist are skipped.

        Args:
            source: Profile to scan.

        Returns:
            FOUND or EMPTY on a successful call, FAILED if nix-env is
            missing, exits non-zero, or times out.
        """
        if not self.is_available():
            return ScanOutcome.failed("nix-env is not available")

        args = ["nix-env", "--list-generations", "--profile", str(source.profile_path)]
        result = run_with_timeout(args, self._timeout)
        if result is None:
            return ScanOutcome.failed("nix-env --list-generations timed out")
        if not result.success:
            return ScanOutcome.failed(f"nix-env failed: {result.stderr.strip()}")

        records: list[RawGeneration] = []
        for line in result.stdout.splitlines():
            parsed = self._parse_line(line)
            if parsed is None:
                continue
            gen_id, timestamp = parsed
            gen_path = source.generation_path(gen_id)
            if not gen_path.exists():
                logger.debug("Skipping generation %d: %s does not exist", gen_id, gen_path)
                continue
            records.append(RawGeneration(id=gen_id, timestamp=timestamp, path=gen_path))

        return ScanOutcome.from_records(records)

    @staticmethod
    def _parse_line(line: str) -> tuple[int, datetime] | None:
        """Parse one line of ``nix-env --list-generations`` output.

        Args:
            line: Output line.

        Returns:
            Tuple of (id, local timestamp), or None if the line is blank
            or malformed.
        """
        parts = line.split()
        if len(parts) < 3:
            return None

        try:
            gen_id = int(parts[0])
            naive = datetime.strptime(f"{parts[1]} {parts[2]}", _DATETIME_FORMAT)
        except ValueError:
            logger.debug("Skipping malformed nix-env line: %r", line[:100])
            return None

        if gen_id < 0:
            return None
        return gen_id, naive.astimezone()
