"""Background execution of slow queries.

Store accounting and generation discovery can take tens of seconds.
:class:`BackgroundTask` runs such a query on a daemon thread and hands
the single result back through a one-slot queue that the foreground
polls without blocking.
"""

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskStatus(Enum):
    """State of a background task as seen by the poller.

    Attributes:
        PENDING: Still running.
        DONE: Finished; the result is available.
        CRASHED: The worker raised or vanished without a result.
    """

    PENDING = "pending"
    DONE = "done"
    CRASHED = "crashed"


@dataclass(frozen=True, slots=True)
class _Completion(Generic[T]):
    value: T | None = None
    error: str | None = None


class BackgroundTask(Generic[T]):
    """Run a function on a daemon thread and poll for its result.

    Example:
        >>> task = BackgroundTask(load_store_info, name="store")
        >>> task.start()
        >>> while task.poll() is TaskStatus.PENDING:
        ...     time.sleep(0.1)
        >>> info = task.result

    Args:
        func: Zero-argument callable producing the result.
        name: Thread name (appears in log messages).
    """

    def __init__(self, func: Callable[[], T], name: str = "background") -> None:
        self._func = func
        self._name = name
        self._queue: queue.Queue[_Completion[T]] = queue.Queue(maxsize=1)
        self._thread: threading.Thread | None = None
        self._status = TaskStatus.PENDING
        self._result: T | None = None
        self._error: str | None = None

    def start(self) -> None:
        """Start the worker thread.

        Raises:
            RuntimeError: If the task was already started.
        """
        if self._thread is not None:
            msg = f"Task {self._name} already started"
            raise RuntimeError(msg)
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            completion: _Completion[T] = _Completion(value=self._func())
        except Exception as e:
            logger.exception("Background task %s failed", self._name)
            completion = _Completion(error=f"{type(e).__name__}: {e}")
        self._queue.put(completion)

    def poll(self) -> TaskStatus:
        """Check for completion without blocking.

        Returns:
            PENDING while running, DONE once a result arrived, CRASHED if
            the worker failed or exited without delivering a result.
        """
        if self._status is not TaskStatus.PENDING:
            return self._status

        try:
            completion = self._queue.get_nowait()
        except queue.Empty:
            if self._thread is not None and not self._thread.is_alive() and self._queue.empty():
                self._status = TaskStatus.CRASHED
                self._error = "Background thread exited without a result"
            return self._status

        if completion.error is not None:
            self._status = TaskStatus.CRASHED
            self._error = completion.error
        else:
            self._status = TaskStatus.DONE
            self._result = completion.value
        return self._status

    def wait(self, timeout: float | None = None) -> TaskStatus:
        """Block until the task finishes or the timeout elapses.

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely.

        Returns:
            Task status after waiting.
        """
        if self._thread is not None:
            self._thread.join(timeout)
        return self.poll()

    @property
    def result(self) -> T | None:
        """Result of the task (None until DONE)."""
        return self._result

    @property
    def error(self) -> str | None:
        """Failure description (None unless CRASHED)."""
        return self._error
