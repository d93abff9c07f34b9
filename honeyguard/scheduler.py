"""Delayed, cancellable auto-replies.

Each session owns at most one armed reply. Scheduling again for the same
session cancels the earlier one (last intent wins). The delay is drawn
uniformly from [min_delay_ms, max_delay_ms] so replies look like a human
typing.

Liveness is checked twice: the engine skips scheduling for a stale session,
and the timer re-checks when it fires, because the user may switch chats
while the timer is pending.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from honeyguard.models import InjectionCommand

logger = logging.getLogger(__name__)


@dataclass
class ScheduledReply:
    target_session: str
    text: str
    fire_at: float
    delay_ms: int
    cancelled: bool = False
    fired: bool = False
    _timer: Optional[threading.Timer] = field(default=None, repr=False, compare=False)


class AutoReplyScheduler:

    def __init__(
        self,
        injector: Callable[[InjectionCommand], None],
        is_live: Callable[[str], bool] = lambda session_id: True,
        min_delay_ms: int = 2000,
        max_delay_ms: int = 6000,
        rng: Optional[random.Random] = None,
    ) -> None:
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError("invalid reply delay bounds")
        self._injector = injector
        self.is_live = is_live
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self._rng = rng or random.Random()
        self._pending: Dict[str, ScheduledReply] = {}
        self._lock = threading.Lock()

    def schedule(self, session_id: str, text: str) -> ScheduledReply:
        """Arm a one-shot reply for session_id, replacing any pending one."""
        delay_ms = self._rng.randint(self.min_delay_ms, self.max_delay_ms)
        reply = ScheduledReply(
            target_session=session_id,
            text=text,
            fire_at=time.time() + delay_ms / 1000.0,
            delay_ms=delay_ms,
        )
        timer = threading.Timer(delay_ms / 1000.0, self._fire, args=(reply,))
        timer.daemon = True
        reply._timer = timer

        with self._lock:
            previous = self._pending.pop(session_id, None)
            if previous is not None:
                self._disarm(previous)
                logger.info(f"[{session_id[:8]}] Replacing pending auto-reply")
            self._pending[session_id] = reply
            timer.start()

        logger.info(f"[{session_id[:8]}] Auto-reply queued in {delay_ms}ms")
        return reply

    def cancel(self, session_id: str) -> bool:
        """Cancel the pending reply for a session. True if one was pending."""
        with self._lock:
            reply = self._pending.pop(session_id, None)
            if reply is None:
                return False
            self._disarm(reply)
        logger.info(f"[{session_id[:8]}] Pending auto-reply cancelled")
        return True

    def cancel_all(self) -> int:
        with self._lock:
            replies = list(self._pending.values())
            self._pending.clear()
            for reply in replies:
                self._disarm(reply)
        return len(replies)

    def pending(self, session_id: str) -> Optional[ScheduledReply]:
        with self._lock:
            return self._pending.get(session_id)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @staticmethod
    def _disarm(reply: ScheduledReply) -> None:
        reply.cancelled = True
        if reply._timer is not None:
            reply._timer.cancel()

    def _fire(self, reply: ScheduledReply) -> None:
        session_id = reply.target_session
        # Liveness check and hand-off happen under the lock, so a concurrent
        # cancel() from a chat switch either suppresses the reply or runs
        # after it was handed off and can discard it downstream.
        with self._lock:
            if reply.cancelled or self._pending.get(session_id) is not reply:
                return
            del self._pending[session_id]

            if not self.is_live(session_id):
                reply.cancelled = True
                logger.info(f"[{session_id[:8]}] Session went stale, auto-reply suppressed")
                return

            reply.fired = True
            try:
                self._injector(InjectionCommand(text=reply.text, sessionId=session_id))
            except Exception as exc:
                logger.error(f"[{session_id[:8]}] Auto-reply injection failed: {exc}")
                return
        logger.info(f"[{session_id[:8]}] Auto-reply handed off for injection")
