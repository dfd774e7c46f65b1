import threading
import time


class RateLimiter:
    """Spaces out calls to at most max_per_second, blocking the caller."""

    def __init__(self, max_per_second: float) -> None:
        self._interval = 1.0 / max_per_second if max_per_second > 0 else 0.0
        self._next_slot = 0.0
        self._lock = threading.Lock()

    def acquire(self) -> None:
        if self._interval == 0.0:
            return
        with self._lock:
            now = time.monotonic()
            wait_seconds = self._next_slot - now
            self._next_slot = max(now, self._next_slot) + self._interval
        if wait_seconds > 0:
            time.sleep(wait_seconds)
