"""Tracks which conversation is open on the scraping side.

Switching chats:
    1. retires the old session id (late work for it is suppressed)
    2. cancels any auto-reply still pending for it
    3. forgets which messages were already processed in the old view
    4. makes the new chat's session id active

Thread-safe via a lock on the tracker state.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


# Processed-message fingerprints kept per view before the set is reset
PROCESSED_LIMIT: int = 1000
# Retired session ids remembered for liveness checks
RETIRED_LIMIT: int = 1000


def session_id_for(title: str) -> str:
    """Stable session id for a chat title (32-bit string hash)."""
    h = 0
    for ch in title or "":
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"wa-session-{abs(h)}"


def message_fingerprint(text: str) -> str:
    """Cheap per-view dedup key: first 20 chars plus total length."""
    return f"{text[:20]}{len(text)}"


class ConversationTracker:

    def __init__(self, on_retire: Optional[Callable[[str], None]] = None) -> None:
        self._active: Optional[str] = None
        self._retired: "OrderedDict[str, None]" = OrderedDict()
        self._processed: Set[str] = set()
        self._lock = threading.Lock()
        self._on_retire = on_retire

    @property
    def active(self) -> Optional[str]:
        with self._lock:
            return self._active

    def switch_chat(self, title: str) -> str:
        """Activate the chat called `title` and return its session id."""
        new_session = session_id_for(title)
        with self._lock:
            old_session = self._active
            if old_session == new_session:
                return new_session
            if old_session is not None:
                self._retired[old_session] = None
                while len(self._retired) > RETIRED_LIMIT:
                    self._retired.popitem(last=False)
            self._retired.pop(new_session, None)
            self._processed.clear()
            self._active = new_session

        logger.info(
            f"Chat switched {old_session[:8] if old_session else '-'} -> {new_session[:8]}"
        )
        if old_session is not None and self._on_retire is not None:
            self._on_retire(old_session)
        return new_session

    def is_live(self, session_id: str) -> bool:
        """False once the session was switched away from, or when another
        chat is the active one."""
        with self._lock:
            if session_id in self._retired:
                return False
            return self._active is None or self._active == session_id

    def claim_message(self, text: str) -> bool:
        """Record text as processed in the current view.

        Returns False when the same message was already claimed, so the
        caller can skip it.
        """
        key = message_fingerprint(text or "")
        with self._lock:
            if key in self._processed:
                return False
            if len(self._processed) >= PROCESSED_LIMIT:
                self._processed.clear()
            self._processed.add(key)
            return True

    def processed_count(self) -> int:
        with self._lock:
            return len(self._processed)
