"""Pending injectReply commands waiting for the scraping side to pick up.

A command is only handed out while its session is still the live chat.
Retiring a session discards its queued commands, and drain() re-checks
liveness so a command pushed during a chat switch is never delivered into
the newly opened conversation.
"""

import logging
import threading
from collections import deque
from typing import Callable, List, Optional

from honeyguard.models import InjectionCommand

logger = logging.getLogger(__name__)


class InjectionOutbox:
    """Bounded FIFO. When full, the oldest undelivered command is dropped."""

    def __init__(
        self,
        capacity: int = 100,
        is_live: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._queue: "deque[InjectionCommand]" = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._is_live = is_live

    def push(self, command: InjectionCommand) -> None:
        with self._lock:
            if len(self._queue) == self._queue.maxlen:
                dropped = self._queue[0]
                logger.warning(f"[{dropped.sessionId[:8]}] Outbox full, dropping oldest reply")
            self._queue.append(command)

    def discard(self, session_id: str) -> int:
        """Drop every queued command for session_id. Returns how many."""
        with self._lock:
            kept = [c for c in self._queue if c.sessionId != session_id]
            removed = len(self._queue) - len(kept)
            self._queue.clear()
            self._queue.extend(kept)
        if removed:
            logger.info(f"[{session_id[:8]}] Discarded {removed} queued auto-reply(s)")
        return removed

    def drain(self) -> List[InjectionCommand]:
        with self._lock:
            commands = list(self._queue)
            self._queue.clear()
        if self._is_live is None:
            return commands

        live = []
        for command in commands:
            if self._is_live(command.sessionId):
                live.append(command)
            else:
                logger.info(f"[{command.sessionId[:8]}] Session went stale, queued auto-reply dropped")
        return live

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)
