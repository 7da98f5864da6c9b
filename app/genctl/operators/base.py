"""Abstract base class for profile operators.

This module defines the ProfileOperator interface that builds and runs
the restore and delete commands of one profile type.
"""

import logging
from abc import ABC, abstractmethod
from subprocess import TimeoutExpired

from genctl.models.action import CommandOutcome
from genctl.models.generation import GenerationSource, ProfileType
from genctl.utils.shell import format_command, run_command

logger = logging.getLogger(__name__)


class ProfileOperator(ABC):
    """Abstract base class for profile operators.

    Operators turn a restore or delete request into an argument vector
    and execute it. The command text shown in a dry run is the exact
    text that a real run executes.

    Attributes:
        source: Profile the operator acts on.
        dry_run: If True, only describe commands without executing them.

    Example:
        >>> operator = SystemOperator(source, dry_run=True)
        >>> outcome = operator.delete([38])
        >>> print(outcome.message, outcome.command)
    """

    # Activation and deletion may prompt for a password and build nothing
    _COMMAND_TIMEOUT: float = 600.0

    def __init__(self, source: GenerationSource, dry_run: bool = False) -> None:
        """Initialize the operator.

        Args:
            source: Profile the operator acts on.
            dry_run: If True, only simulate actions without executing them.

        Raises:
            ValueError: If the source belongs to a different profile type.
        """
        if source.profile_type != self.profile_type:
            msg = (
                f"Source profile type {source.profile_type.value} doesn't match "
                f"operator profile type {self.profile_type.value}"
            )
            raise ValueError(msg)
        self.source = source
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if operator is in dry-run mode."""
        return self._dry_run

    @property
    @abstractmethod
    def profile_type(self) -> ProfileType:
        """Return the profile type this operator handles."""

    @abstractmethod
    def build_restore_command(self, generation_id: int) -> list[str]:
        """Build the command that activates a generation.

        Args:
            generation_id: Generation to switch to.

        Returns:
            Argument vector.
        """

    @abstractmethod
    def build_delete_command(self, generation_ids: list[int]) -> list[str]:
        """Build the command that deletes exactly the given generations.

        Args:
            generation_ids: Non-empty list of ids, passed explicitly.

        Returns:
            Argument vector.
        """

    def preview_restore(self, generation_id: int) -> str:
        """Return the restore command text shown before confirmation."""
        return format_command(self.build_restore_command(generation_id))

    def preview_delete(self, generation_ids: list[int]) -> str:
        """Return the delete command text shown before confirmation."""
        return format_command(self.build_delete_command(generation_ids))

    def restore(self, generation_id: int) -> CommandOutcome:
        """Switch the profile to a generation.

        Args:
            generation_id: Generation to activate.

        Returns:
            CommandOutcome describing the (simulated) execution.
        """
        args = self.build_restore_command(generation_id)
        if self.dry_run:
            return CommandOutcome(
                success=True,
                message=f"Dry run: Would execute restore to generation {generation_id}",
                command=format_command(args),
            )
        return self._execute(args, f"restore generation {generation_id}")

    def delete(self, generation_ids: list[int]) -> CommandOutcome:
        """Delete generations of the profile.

        An empty list is a successful no-op and spawns no process.

        Args:
            generation_ids: Generations to delete.

        Returns:
            CommandOutcome describing the (simulated) execution.
        """
        if not generation_ids:
            return CommandOutcome(
                success=True,
                message="No generations specified for deletion",
                command="",
            )

        args = self.build_delete_command(generation_ids)
        count = len(generation_ids)
        if self.dry_run:
            return CommandOutcome(
                success=True,
                message=f"Dry run: Would delete {count} generation(s)",
                command=format_command(args),
            )
        return self._execute(args, f"delete {count} generation(s)")

    def _execute(self, args: list[str], description: str) -> CommandOutcome:
        """Run a command and translate its exit status into an outcome.

        Args:
            args: Argument vector.
            description: Action phrase used in the result message.

        Returns:
            CommandOutcome; a command that cannot be started is a failure,
            never an exception.
        """
        command = format_command(args)
        logger.info("Executing %s: %s", description, command)

        try:
            result = run_command(args, timeout=self._COMMAND_TIMEOUT)
        except (OSError, TimeoutExpired) as e:
            logger.warning("Cannot execute %s: %s", command, e)
            return CommandOutcome(
                success=False,
                message=f"Failed to {description}: {e}",
                command=command,
            )

        if result.success:
            return CommandOutcome(
                success=True,
                message=f"Successfully {description}",
                command=command,
            )

        error = (
            result.stderr.strip()
            or result.stdout.strip()
            or f"Command failed with exit code {result.returncode}"
        )
        logger.warning("%s failed: %s", command, error)
        return CommandOutcome(
            success=False,
            message=f"Failed to {description}: {error}",
            command=command,
        )
