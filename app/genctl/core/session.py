"""Confirm/undo state machine for destructive actions.

:class:`GenerationSession` is the read/trigger interface a front end
drives. It owns the generation lists and pin overlays per profile, the
current popup, the pending undo notice and the flash message. Every
destructive action goes through an explicit confirmation step; a real
delete is followed by a grace-period notice whose countdown is always
recomputed from the instant the delete completed.

The undo notice never reverts anything: deleted generations are gone.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from genctl.core.config import GenctlConfig
from genctl.core.diff import DiffError, GenerationDiff, GenerationDiffer
from genctl.core.generations import discover_generations
from genctl.core.state import HistoryError, HistoryLedger
from genctl.core.storage import StoreActionError, load_store_info, run_clean_action
from genctl.core.worker import BackgroundTask, TaskStatus
from genctl.models.action import ActionType, CommandOutcome
from genctl.models.generation import Generation, GenerationSource, ProfileType
from genctl.models.history import create_history_entry
from genctl.models.store import CleanAction, GcResult, StoreInfo
from genctl.operators import get_operator
from genctl.utils.shell import format_command

logger = logging.getLogger(__name__)

# Seconds a flash message stays visible
FLASH_SECONDS = 3.0

_CLEAN_ACTIONS: dict[ActionType, CleanAction] = {
    ActionType.GARBAGE_COLLECT: CleanAction.GARBAGE_COLLECT,
    ActionType.OPTIMISE: CleanAction.OPTIMISE,
    ActionType.FULL_CLEAN: CleanAction.FULL_CLEAN,
}


class SessionState(Enum):
    """State of the confirm/undo machine.

    Attributes:
        IDLE: Nothing pending.
        CONFIRMING: An action waits for confirm() or cancel().
        SUCCEEDED: The last action succeeded; no undo notice.
        UNDO_PENDING: A delete succeeded; the undo notice is counting down.
        FAILED: The last action failed; an error popup waits for acknowledge().
    """

    IDLE = "idle"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    UNDO_PENDING = "undo_pending"
    FAILED = "failed"


class PopupKind(Enum):
    """Kind of modal popup shown to the user."""

    CONFIRM = "confirm"
    ERROR = "error"
    UNDO = "undo"


@dataclass(frozen=True, slots=True)
class Popup:
    """Modal popup content.

    Attributes:
        kind: Confirmation, error or undo notice.
        title: Popup title.
        message: Body text.
        command: Command text to be executed (confirmation only).
        seconds_remaining: Countdown value (undo notice only).
    """

    kind: PopupKind
    title: str
    message: str
    command: str = ""
    seconds_remaining: int = 0


@dataclass(frozen=True, slots=True)
class PendingAction:
    """An action waiting for confirmation.

    Attributes:
        action: Kind of action.
        command: Command text shown in the confirmation popup.
        profile: Target profile (profile actions only).
        generation_ids: Target generations (profile actions only).
    """

    action: ActionType
    command: str
    profile: ProfileType | None = None
    generation_ids: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class PendingUndo:
    """Grace-period notice after a completed delete.

    Attributes:
        profile: Profile the generations were deleted from.
        generation_ids: Deleted generations.
        started_at: Clock reading when the delete completed.
        message: Text shown in the notice.
    """

    profile: ProfileType
    generation_ids: tuple[int, ...]
    started_at: float
    message: str


@dataclass(frozen=True, slots=True)
class FlashMessage:
    """Short-lived status line.

    Attributes:
        text: Message text.
        is_error: Whether to render as an error.
        created_at: Clock reading when the message was shown.
    """

    text: str
    is_error: bool
    created_at: float

    def is_expired(self, now: float, seconds: float = FLASH_SECONDS) -> bool:
        """Check if the message has been visible for ``seconds``."""
        return now - self.created_at >= seconds


class GenerationSession:
    """Generation lists, pins, and the confirm/undo state machine.

    Example:
        >>> session = GenerationSession({ProfileType.SYSTEM: source})
        >>> session.refresh()
        >>> if session.request_delete(ProfileType.SYSTEM, [38]):
        ...     outcome = session.confirm()
        >>> session.tick()

    Args:
        sources: Available profiles.
        config: Configuration (dry run, timeouts, undo window, initial pins).
        dry_run: Overrides ``config.dry_run`` when not None.
        ledger: Cleanup history. Defaults to the standard history file.
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        sources: dict[ProfileType, GenerationSource],
        *,
        config: GenctlConfig | None = None,
        dry_run: bool | None = None,
        ledger: HistoryLedger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sources = dict(sources)
        self._config = config or GenctlConfig()
        self.dry_run = self._config.dry_run if dry_run is None else dry_run
        self._ledger = ledger or HistoryLedger(limit=self._config.history_limit)
        self._clock = clock

        self._generations: dict[ProfileType, list[Generation]] = {p: [] for p in self._sources}
        self._pinned: dict[ProfileType, set[int]] = {
            p: self._config.pinned.for_profile(p) for p in ProfileType
        }

        self.state = SessionState.IDLE
        self.popup: Popup | None = None
        self.flash: FlashMessage | None = None
        self.pending: PendingAction | None = None
        self.pending_undo: PendingUndo | None = None
        self.last_outcome: CommandOutcome | None = None
        self.diff: GenerationDiff | None = None
        self.store_info: StoreInfo | None = None
        self._store_task: BackgroundTask[StoreInfo] | None = None

    # -- Read interface -------------------------------------------------

    @property
    def profiles(self) -> list[ProfileType]:
        """Profiles available in this session."""
        return list(self._sources)

    def source(self, profile: ProfileType) -> GenerationSource | None:
        """Return the source of a profile, if available."""
        return self._sources.get(profile)

    def generations(self, profile: ProfileType) -> list[Generation]:
        """Return the cached generations of a profile, newest first."""
        return list(self._generations.get(profile, []))

    def pinned(self, profile: ProfileType) -> set[int]:
        """Return the pinned ids of a profile."""
        return set(self._pinned[profile])

    def undo_remaining(self, now: float | None = None) -> int:
        """Return whole seconds left in the undo window (0 when none)."""
        if self.pending_undo is None:
            return 0
        current = self._clock() if now is None else now
        elapsed = int(current - self.pending_undo.started_at)
        return max(0, self._config.undo_seconds - elapsed)

    @property
    def store_loading(self) -> bool:
        """Check if a background store analysis is running."""
        return self._store_task is not None

    # -- Data loading ---------------------------------------------------

    def refresh(self, profile: ProfileType | None = None) -> None:
        """Re-discover generations, applying the pin overlay.

        Args:
            profile: Profile to refresh. All profiles if None.
        """
        targets = [profile] if profile is not None else list(self._sources)
        timeouts = self._config.timeouts
        for target in targets:
            source = self._sources.get(target)
            if source is None:
                continue
            self._generations[target] = discover_generations(
                source,
                boot_root=self._config.boot_root_path,
                pinned_ids=self._pinned[target],
                listing_timeout=timeouts.generation_listing,
                closure_timeout=timeouts.closure_size,
            )

    def set_generations(self, profile: ProfileType, generations: list[Generation]) -> None:
        """Replace the cached generations of a profile, applying pins."""
        pinned = self._pinned[profile]
        self._generations[profile] = [g.with_overlay(pinned=g.id in pinned) for g in generations]

    def start_store_load(self) -> None:
        """Start the store analysis on a background thread.

        The result is picked up by :meth:`tick`.
        """
        if self._store_task is not None:
            return
        config = self._config
        task: BackgroundTask[StoreInfo] = BackgroundTask(
            lambda: load_store_info(config), name="store-analysis"
        )
        task.start()
        self._store_task = task

    def show_diff(self, profile: ProfileType, old_id: int, new_id: int) -> GenerationDiff | None:
        """Compute and keep the diff between two generations of a profile.

        Args:
            profile: Profile of both generations.
            old_id: Older generation.
            new_id: Newer generation.

        Returns:
            The diff, or None (with a flash error) if it cannot be computed.
        """
        source = self._sources.get(profile)
        if source is None:
            self._show_flash(f"{profile.label} profile not available", is_error=True)
            return None
        differ = GenerationDiffer(timeout=self._config.timeouts.package_listing)
        try:
            self.diff = differ.compare(source, old_id, source, new_id)
        except DiffError as e:
            self._show_flash(str(e), is_error=True)
            return None
        return self.diff

    # -- Triggers -------------------------------------------------------

    def request_restore(self, profile: ProfileType, generation_id: int) -> bool:
        """Ask to switch a profile to a generation.

        Returns:
            True if a confirmation is now pending, False if rejected.
        """
        if not self._can_request():
            return False
        source = self._require_source(profile)
        if source is None:
            return False

        generation = self._find(profile, generation_id)
        if generation is None:
            self._show_flash(f"Generation {generation_id} not found", is_error=True)
            return False
        if generation.is_current:
            self._show_flash("Cannot restore the current generation", is_error=True)
            return False

        command = get_operator(source, self.dry_run).preview_restore(generation_id)
        self.pending = PendingAction(
            action=ActionType.RESTORE,
            command=command,
            profile=profile,
            generation_ids=(generation_id,),
        )
        self._confirm_popup(
            "Confirm restore",
            f"Restore {profile.label} to generation {generation_id} "
            f"({generation.formatted_date}, {generation.version or '?'})?",
            command,
        )
        return True

    def request_delete(self, profile: ProfileType, generation_ids: list[int]) -> bool:
        """Ask to delete generations of a profile.

        Rejected without spawning anything when the list is empty or any
        id is unknown, current or pinned.

        Returns:
            True if a confirmation is now pending, False if rejected.
        """
        if not self._can_request():
            return False
        source = self._require_source(profile)
        if source is None:
            return False

        ids = list(dict.fromkeys(generation_ids))
        if not ids:
            self._show_flash("No generations selected", is_error=True)
            return False

        for gen_id in ids:
            generation = self._find(profile, gen_id)
            if generation is None:
                self._show_flash(f"Generation {gen_id} not found", is_error=True)
                return False
            if generation.is_current:
                self._show_flash("Cannot delete the current generation", is_error=True)
                return False
            if generation.is_pinned or gen_id in self._pinned[profile]:
                self._show_flash("Cannot delete a pinned generation", is_error=True)
                return False

        command = get_operator(source, self.dry_run).preview_delete(ids)
        self.pending = PendingAction(
            action=ActionType.DELETE,
            command=command,
            profile=profile,
            generation_ids=tuple(ids),
        )
        self._confirm_popup(
            "Confirm delete",
            f"Delete {len(ids)} generation(s): {', '.join(f'#{i}' for i in ids)}?",
            command,
        )
        return True

    def request_gc(self) -> bool:
        """Ask to collect garbage."""
        return self._request_store_action(ActionType.GARBAGE_COLLECT)

    def request_optimise(self) -> bool:
        """Ask to optimise the store."""
        return self._request_store_action(ActionType.OPTIMISE)

    def request_full_clean(self) -> bool:
        """Ask to delete all old generations and collect garbage."""
        return self._request_store_action(ActionType.FULL_CLEAN)

    def confirm(self) -> CommandOutcome | None:
        """Execute the pending action.

        Returns:
            The outcome, or None if nothing was awaiting confirmation.
        """
        if self.state is not SessionState.CONFIRMING or self.pending is None:
            return None

        pending = self.pending
        self.pending = None
        self.popup = None

        if pending.action.is_store_action:
            outcome = self._execute_store_action(_CLEAN_ACTIONS[pending.action], pending.command)
        else:
            outcome = self._execute_profile_action(pending)
        completed_at = self._clock()
        self.last_outcome = outcome

        if not outcome.success:
            self.state = SessionState.FAILED
            self.popup = Popup(PopupKind.ERROR, "Command failed", outcome.message, outcome.command)
            return outcome

        if not self.dry_run:
            self.refresh(pending.profile)

        is_real_delete = pending.action is ActionType.DELETE and not self.dry_run
        if is_real_delete and pending.profile is not None:
            count = len(pending.generation_ids)
            message = f"Deleted {count} generation(s)"
            self.pending_undo = PendingUndo(
                profile=pending.profile,
                generation_ids=pending.generation_ids,
                started_at=completed_at,
                message=message,
            )
            self.state = SessionState.UNDO_PENDING
            self.popup = Popup(
                PopupKind.UNDO,
                "Generations deleted",
                message,
                seconds_remaining=self._config.undo_seconds,
            )
        else:
            self.state = SessionState.SUCCEEDED
            self._show_flash(outcome.message)
        return outcome

    def cancel(self) -> None:
        """Abandon the pending confirmation."""
        if self.state is SessionState.CONFIRMING:
            self.pending = None
            self.popup = None
            self.state = SessionState.IDLE

    def acknowledge(self) -> None:
        """Close the error popup after a failed action."""
        if self.state is SessionState.FAILED:
            self.popup = None
            self.state = SessionState.IDLE

    def dismiss_undo(self) -> None:
        """Close the undo notice early. Nothing is reverted."""
        if self.state is SessionState.UNDO_PENDING:
            self._close_undo("Undo notice closed")

    def toggle_pin(self, profile: ProfileType, generation_id: int) -> bool | None:
        """Pin or unpin a generation.

        Returns:
            The new pinned state, or None if the generation is unknown.
        """
        if self._find(profile, generation_id) is None:
            self._show_flash(f"Generation {generation_id} not found", is_error=True)
            return None

        pinned = self._pinned[profile]
        now_pinned = generation_id not in pinned
        if now_pinned:
            pinned.add(generation_id)
        else:
            pinned.discard(generation_id)

        self._generations[profile] = [
            g.with_overlay(pinned=now_pinned) if g.id == generation_id else g
            for g in self._generations[profile]
        ]
        self._show_flash(f"Generation {generation_id} {'pinned' if now_pinned else 'unpinned'}")
        return now_pinned

    def tick(self, now: float | None = None) -> None:
        """Advance timers and collect background results.

        Args:
            now: Clock reading. Taken from the session clock if None.
        """
        current = self._clock() if now is None else now

        if self.flash is not None and self.flash.is_expired(current):
            self.flash = None

        if self.state is SessionState.UNDO_PENDING and self.pending_undo is not None:
            remaining = self.undo_remaining(current)
            if remaining <= 0:
                self._close_undo("Action confirmed", now=current)
            elif self.popup is not None:
                self.popup = Popup(
                    PopupKind.UNDO,
                    self.popup.title,
                    self.popup.message,
                    seconds_remaining=remaining,
                )

        self._poll_store_task()

    # -- Internals ------------------------------------------------------

    def _can_request(self) -> bool:
        if self.state in (SessionState.IDLE, SessionState.SUCCEEDED):
            return True
        self._show_flash("Finish the current action first", is_error=True)
        return False

    def _require_source(self, profile: ProfileType) -> GenerationSource | None:
        source = self._sources.get(profile)
        if source is None:
            self._show_flash(f"{profile.label} profile not available", is_error=True)
        return source

    def _find(self, profile: ProfileType, generation_id: int) -> Generation | None:
        for generation in self._generations.get(profile, []):
            if generation.id == generation_id:
                return generation
        return None

    def _confirm_popup(self, title: str, message: str, command: str) -> None:
        self.popup = Popup(PopupKind.CONFIRM, title, message, command)
        self.state = SessionState.CONFIRMING

    def _request_store_action(self, action: ActionType) -> bool:
        if not self._can_request():
            return False
        clean = _CLEAN_ACTIONS[action]
        command = format_command(clean.command)
        self.pending = PendingAction(action=action, command=command)
        message = f"Run {clean.label.lower()}?"
        if clean.needs_sudo:
            message += " This deletes all old generations of every profile."
        self._confirm_popup(f"Confirm {clean.label.lower()}", message, command)
        return True

    def _execute_profile_action(self, pending: PendingAction) -> CommandOutcome:
        source = self._sources.get(pending.profile) if pending.profile is not None else None
        if source is None:
            return CommandOutcome(success=False, message="Profile not available")
        operator = get_operator(source, self.dry_run)
        if pending.action is ActionType.RESTORE:
            return operator.restore(pending.generation_ids[0])
        return operator.delete(list(pending.generation_ids))

    def _execute_store_action(self, action: CleanAction, command: str) -> CommandOutcome:
        if self.dry_run:
            return CommandOutcome(
                success=True,
                message=f"Dry run: Would run {action.label.lower()}",
                command=command,
            )

        try:
            result = run_clean_action(action)
        except StoreActionError as e:
            return CommandOutcome(success=False, message=str(e), command=command)

        if isinstance(result, GcResult):
            freed, removed = result.bytes_freed, result.paths_removed
        else:
            freed, removed = result.bytes_saved, 0

        entry = create_history_entry(action.label, freed, removed)
        try:
            self._ledger.append(entry)
        except HistoryError as e:
            logger.warning("Cleanup history not updated: %s", e)

        return CommandOutcome(
            success=True,
            message=f"{action.label} freed {entry.freed_human}",
            command=command,
        )

    def _close_undo(self, message: str, now: float | None = None) -> None:
        self.pending_undo = None
        self.popup = None
        self.state = SessionState.IDLE
        self._show_flash(message, now=now)

    def _show_flash(self, text: str, is_error: bool = False, now: float | None = None) -> None:
        created = self._clock() if now is None else now
        self.flash = FlashMessage(text=text, is_error=is_error, created_at=created)
        if is_error:
            logger.debug("Rejected: %s", text)

    def _poll_store_task(self) -> None:
        task = self._store_task
        if task is None:
            return
        status = task.poll()
        if status is TaskStatus.PENDING:
            return
        self._store_task = None
        if status is TaskStatus.DONE:
            self.store_info = task.result
        else:
            self.store_info = StoreInfo.empty()
            self._show_flash(f"Storage analysis failed: {task.error}", is_error=True)
