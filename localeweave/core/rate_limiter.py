"""
Rate limiter

Paces outbound calls that share one limiter instance so that no two call
starts are closer together than the configured delay.
"""

import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """
    Thread-safe rate limiter.

    wait() and record_call() are separate so a caller can wait, start the
    call and then record it. acquire() does both under one lock, which is
    what concurrent callers sharing a limiter should use.

    Example:
        >>> limiter = RateLimiter(delay=0.5)
        >>> limiter.wait()
        >>> limiter.record_call()
    """

    def __init__(
        self,
        delay: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize a new rate limiter.

        Args:
            delay: Minimum seconds between consecutive call starts
            clock: Time source, monotonic seconds
            sleep: Sleep function
        """
        self.delay = delay
        self._clock = clock
        self._sleep = sleep
        self._last_call_time: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def last_call_time(self) -> Optional[float]:
        with self._lock:
            return self._last_call_time

    def _wait_locked(self) -> None:
        if self._last_call_time is None:
            return

        elapsed = self._clock() - self._last_call_time
        sleep_time = self.delay - elapsed
        if sleep_time > 0:
            self._sleep(sleep_time)

    def wait(self) -> None:
        """Block until the delay has elapsed since the last recorded call start."""
        with self._lock:
            self._wait_locked()

    def record_call(self) -> None:
        """Record the current time as the start of the latest call."""
        with self._lock:
            self._last_call_time = self._clock()

    def acquire(self) -> None:
        """Wait for the slot and record the call start atomically."""
        with self._lock:
            self._wait_locked()
            self._last_call_time = self._clock()

    def reset(self) -> None:
        """Forget the last call time; the next wait() returns immediately."""
        with self._lock:
            self._last_call_time = None
