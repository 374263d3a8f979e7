"""Overall deadline and cancellation signal for one job"""
import threading
import time
from typing import Callable, Optional

from ..exceptions import JobCancelledError, JobTimeoutError


class Deadline:
    """
    Time budget shared by every wait in a job.

    Waits are clamped to the remaining budget and sleeping wakes as soon
    as cancel() is called.
    """

    def __init__(self, seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self._expires_at = None if seconds is None else clock() + seconds
        self._cancelled = threading.Event()

    def remaining(self) -> Optional[float]:
        """Seconds left, or None for an unbounded deadline."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        self._cancelled.set()

    def check(self):
        """Raise if the job was cancelled or ran out of time."""
        if self.cancelled:
            raise JobCancelledError("operation cancelled")
        if self.expired:
            raise JobTimeoutError(f"deadline of {self.seconds:.0f}s exceeded")

    def timeout(self, limit: float) -> float:
        """Per-request timeout: ``limit`` clamped to the remaining budget."""
        remaining = self.remaining()
        if remaining is None:
            return limit
        return min(limit, remaining)

    def sleep(self, seconds: float):
        """Sleep up to ``seconds``, waking early on cancel; then check()."""
        self.check()
        wait = self.timeout(seconds)
        if wait > 0:
            self._cancelled.wait(wait)
        self.check()
        if wait < seconds:
            # Slept through the rest of the budget
            raise JobTimeoutError(f"deadline of {self.seconds:.0f}s exceeded")
