import threading
import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class SimpleRateLimiter:
    """Spaces calls at least 1/requests_per_sec apart, across threads."""

    def __init__(self, requests_per_sec: float) -> None:
        if requests_per_sec <= 0:
            raise ValueError("requests_per_sec must be > 0")
        self._min_interval = 1.0 / requests_per_sec
        self._last_ts = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            now = time.monotonic()
            sleep_for = self._min_interval - (now - self._last_ts)
            if sleep_for > 0:
                time.sleep(sleep_for)
            self._last_ts = time.monotonic()


def poll_until(fetch: Callable[[], Optional[T]], timeout: float, interval: float) -> Optional[T]:
    """Call `fetch` until it returns something truthy or `timeout` runs out."""
    deadline = time.monotonic() + timeout
    while True:
        result = fetch()
        if result:
            return result
        if time.monotonic() + interval > deadline:
            return None
        time.sleep(interval)
