"""PII redaction applied to every string before it leaves the process.

Phone numbers are replaced first, then email addresses. Neither placeholder
contains a digit or an '@', so running redact() again is a no-op.
"""

from typing import Iterable, List, Optional

from honeyguard.models import Message
from honeyguard.patterns import (
    EMAIL_ADDRESS,
    EMAIL_PLACEHOLDER,
    PHONE_NUMBER,
    PHONE_PLACEHOLDER,
)


def redact(text: Optional[str]) -> str:
    if not text:
        return ""
    text = PHONE_NUMBER.sub(PHONE_PLACEHOLDER, text)
    return EMAIL_ADDRESS.sub(EMAIL_PLACEHOLDER, text)


def redact_history(messages: Iterable[Message]) -> List[Message]:
    """Return copies of the history turns with their text redacted."""
    return [m.model_copy(update={"text": redact(m.text)}) for m in messages or []]


def contains_pii(text: Optional[str]) -> bool:
    if not text:
        return False
    return bool(PHONE_NUMBER.search(text) or EMAIL_ADDRESS.search(text))


def safe_preview(text: Optional[str], max_len: int = 40) -> str:
    """Redacted, single-line excerpt for log messages."""
    s = redact(text).replace("\n", " ").strip()
    if len(s) > max_len:
        return s[: max(0, max_len - 3)].rstrip() + "..."
    return s
