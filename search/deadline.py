# search/deadline.py
import threading
import time
from typing import Callable, Optional

from core.exceptions import SearchCancelledError, SearchDeadlineExceededError


class Deadline:
    """
    Caller-supplied time budget and cancellation flag for one search.

    The orchestrator checks it before the embedding call and before every
    store call, and hands the remaining budget to the store as a server-side
    time limit. ``cancel()`` is safe to call from another thread.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self.expires_at = None if timeout is None else clock() + timeout
        self._cancelled = threading.Event()

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when there is no deadline"""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def max_time_ms(self) -> Optional[int]:
        remaining = self.remaining()
        if remaining is None:
            return None
        return max(1, int(remaining * 1000))

    def check(self, stage: str) -> None:
        if self.cancelled:
            raise SearchCancelledError(
                f"Search cancelled before {stage}", details={"stage": stage}
            )
        if self.expired:
            raise SearchDeadlineExceededError(
                f"Search deadline exceeded before {stage}", details={"stage": stage}
            )
