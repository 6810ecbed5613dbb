"""Per-run control helpers: deadlines, cancellation, and bounded stage waits.

Responsibilities:
- Carry the cancellation flag and optional deadline of one pipeline run.
- Execute a blocking stage call on a worker thread and stop waiting for it
  once the run is cancelled or its deadline elapses.
- Give an aborted stage a bounded window to release what it holds (the fetch
  stage's browser) before control returns to the pipeline.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
import threading
from time import monotonic
from typing import Callable, TypeVar

_StageValue = TypeVar("_StageValue")

_POLL_INTERVAL_SECONDS = 0.05


class StageDeadlineExceeded(Exception):
    """Raised when the run deadline elapses while a stage call is in flight."""


class StageCancelled(Exception):
    """Raised when the run is cancelled while a stage call is in flight."""


class RunControl:
    """Cancellation flag and deadline shared by the run and its requester."""

    def __init__(
        self,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        """Start the deadline clock; `None` means the run never times out."""

        self._clock = clock
        self._timeout_seconds = timeout_seconds
        self._deadline: float | None = None
        self._cancelled = threading.Event()
        self.start()

    def start(self) -> None:
        """Restart the deadline clock from now."""

        if self._timeout_seconds is not None:
            self._deadline = self._clock() + self._timeout_seconds

    def cancel(self) -> None:
        """Request the run to stop as soon as its current stage can."""

        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining_seconds(self) -> float | None:
        """Return seconds left before the deadline, or `None` without a deadline."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining_seconds()
        return remaining is not None and remaining <= 0.0

    def should_stop(self) -> bool:
        """Return whether the run was cancelled or ran out of time."""

        return self.cancelled or self.expired()


def call_with_deadline(
    action: Callable[[], _StageValue],
    control: RunControl,
    release_grace_seconds: float = 0.0,
) -> _StageValue:
    """Run `action` and return its value, waiting no longer than the run allows.

    When the run is cancelled or its deadline elapses first, the worker is
    given up to `release_grace_seconds` to finish on its own; stages that
    watch `control` use that window to release their resources. The worker
    thread is never interrupted and its result is discarded.

    Raises:
        StageCancelled: If the run is cancelled before `action` returns.
        StageDeadlineExceeded: If the deadline elapses before `action` returns.
    """

    if control.cancelled:
        raise StageCancelled()
    if control.expired():
        raise StageDeadlineExceeded()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="blogvoice-stage")
    try:
        future = executor.submit(action)
        while True:
            remaining = control.remaining_seconds()
            poll = _POLL_INTERVAL_SECONDS if remaining is None else min(
                _POLL_INTERVAL_SECONDS, remaining
            )
            done, _ = wait([future], timeout=poll)
            finished = future in done
            # A stage that fails after the run stopped reports the stop, not its own error.
            if finished and (future.exception() is None or not control.should_stop()):
                return future.result()
            if control.cancelled:
                aborted: Exception = StageCancelled()
            elif control.expired():
                aborted = StageDeadlineExceeded()
            else:
                continue
            if not finished and release_grace_seconds > 0:
                wait([future], timeout=release_grace_seconds)
            raise aborted
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
