import random
import time


class RequestThrottle:
    """Spaces consecutive requests at least 1/requests_per_sec apart."""

    def __init__(self, requests_per_sec: float) -> None:
        if requests_per_sec <= 0:
            raise ValueError("requests_per_sec must be > 0")
        self.interval = 1.0 / requests_per_sec
        self._next_at = 0.0

    def wait(self) -> None:
        delay = self._next_at - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        self._next_at = time.monotonic() + self.interval


def backoff_delay(attempt: int, base: float = 0.5, cap: float = 8.0) -> float:
    # exponential, capped, +/-30% jitter
    return min(cap, base * (2 ** attempt)) * (0.7 + random.random() * 0.6)


def backoff_sleep(attempt: int) -> None:
    time.sleep(backoff_delay(attempt))
