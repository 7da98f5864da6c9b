"""Shell execution utilities.

Provides subprocess execution for short synchronous calls and a
timeout-bounded runner for the slow Nix store queries.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a shell command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_with_timeout(args: list[str], timeout: float) -> CommandResult | None:
    """Execute a command with a hard wall-clock timeout.

    Output pipes are drained while waiting so a chatty child cannot block
    on a full pipe. When the timeout elapses the child is killed and
    reaped, and None is returned. Callers treat None as "data
    unavailable", never as an error.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds the command may run.

    Returns:
        CommandResult on normal exit (any exit code), or None if the
        command timed out or could not be started.
    """
    try:
        proc = subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        logger.debug("Cannot start %s: %s", args[0], e)
        return None

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug("%s timed out after %.0fs, killing", args[0], timeout)
        proc.kill()
        proc.communicate()
        return None

    return CommandResult(
        stdout=stdout or "",
        stderr=stderr or "",
        returncode=proc.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def format_command(args: list[str]) -> str:
    """Render an argument vector as the command text shown to users.

    Args:
        args: Command and arguments.

    Returns:
        Arguments joined by single spaces.
    """
    return " ".join(args)
