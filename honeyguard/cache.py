"""Bounded, thread-safe verdict cache.

Keys are a cheap fingerprint: ``session_id + ":" + text[:50]``. Two
different messages sharing a 50-char prefix in the same session collide;
that is accepted in exchange for cheap deduplication.

Retention is two-tier:
    - safe verdicts and degraded fallbacks -> short TTL (context shifts fast,
      and a degraded entry should not outlive a classifier outage for long)
    - review / warning / autonomous_engaged -> long TTL

Capacity is fixed; inserting past it evicts the least recently used entry.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from honeyguard.models import Verdict


KEY_PREFIX_CHARS: int = 50


@dataclass
class CacheEntry:
    verdict: Verdict
    expires_at: float


def make_key(session_id: str, text: Optional[str]) -> str:
    return f"{session_id}:{(text or '')[:KEY_PREFIX_CHARS]}"


class AnalysisCache:
    """LRU + TTL store guarded by a single lock."""

    def __init__(
        self,
        capacity: int = 2000,
        short_ttl: float = 30.0,
        long_ttl: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self.capacity = capacity
        self.short_ttl = short_ttl
        self.long_ttl = long_ttl
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.evictions: int = 0

    def get(self, key: str) -> Optional[Verdict]:
        """Return the cached verdict, or None on miss/expiry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.verdict

    def put(self, key: str, verdict: Verdict) -> None:
        ttl = self.ttl_for(verdict)
        with self._lock:
            self._entries[key] = CacheEntry(verdict, self._clock() + ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
                self.evictions += 1

    def ttl_for(self, verdict: Verdict) -> float:
        if verdict.decision == "safe" or verdict.degraded:
            return self.short_ttl
        return self.long_ttl

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
