"""Thread-safe scanned/detected counters consumed by the popup UI."""

import threading
from typing import Dict

from honeyguard.models import Stats


STAT_KEYS = ("messagesScanned", "scamsDetected")


class StatsRecorder:
    """Monotonic counters. Increments happen under a lock so concurrent
    analyses never drop a count."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {key: 0 for key in STAT_KEYS}
        self._lock = threading.Lock()

    def increment(self, key: str) -> int:
        """Bump a counter and return its new value."""
        with self._lock:
            if key not in self._counts:
                raise KeyError(f"unknown stat: {key}")
            self._counts[key] += 1
            return self._counts[key]

    def snapshot(self) -> Stats:
        with self._lock:
            return Stats(**self._counts)


# Module-level singleton
stats = StatsRecorder()
