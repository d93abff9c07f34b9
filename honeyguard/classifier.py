"""HTTP client for the hosted conversational classifier.

Contract:
    POST {apiUrl}/api/chat   (x-api-key header)
    body  {sessionId, message, conversationHistory, metadata: {source, persona}}
    2xx + JSON object with a "reply" key -> ClassifierResult
    anything else (network error, timeout, bad status, bad body)
        -> ClassifierUnavailable

Callers must pass already-redacted text. Every call carries a timeout so a
dead endpoint cannot hang an analysis.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from honeyguard.models import Message, Settings

logger = logging.getLogger(__name__)


class ClassifierUnavailable(Exception):
    """The classifier could not produce a usable answer."""


@dataclass(frozen=True)
class ClassifierResult:
    reply: Optional[str] = None

    @property
    def has_reply(self) -> bool:
        return bool(self.reply and self.reply.strip())


class RemoteClassifier:

    def __init__(self, timeout: float = 10.0, source: str = "whatsapp_web", http=None) -> None:
        self.timeout = timeout
        self.source = source
        self._http = http or requests

    def classify(
        self,
        redacted_text: str,
        session_id: str,
        history: List[Message],
        settings: Settings,
    ) -> ClassifierResult:
        short_id = session_id[:8]
        payload = {
            "sessionId": session_id,
            "message": redacted_text,
            "conversationHistory": [m.model_dump(exclude_none=True) for m in history or []],
            "metadata": {
                "source": self.source,
                "persona": settings.persona or "default",
            },
        }

        try:
            response = self._http.post(
                f"{settings.apiUrl}/api/chat",
                json=payload,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": settings.apiKey,
                },
            )
        except requests.exceptions.Timeout as exc:
            logger.warning(f"[{short_id}] Classifier timed out after {self.timeout}s")
            raise ClassifierUnavailable("timeout") from exc
        except requests.exceptions.RequestException as exc:
            logger.warning(f"[{short_id}] Classifier network error: {exc}")
            raise ClassifierUnavailable(str(exc)) from exc

        if not 200 <= response.status_code < 300:
            logger.warning(f"[{short_id}] Classifier rejected request: {response.status_code}")
            raise ClassifierUnavailable(f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ClassifierUnavailable("response body is not JSON") from exc

        if not isinstance(data, dict) or "reply" not in data:
            raise ClassifierUnavailable("response body has no reply")

        reply = data["reply"]
        if reply is not None and not isinstance(reply, str):
            raise ClassifierUnavailable("reply is not a string")

        return ClassifierResult(reply=reply)

    def probe(self, settings: Settings) -> bool:
        """Connectivity check used by the settings UI."""
        try:
            response = self._http.get(f"{settings.apiUrl}/", timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.info(f"Classifier probe failed: {exc}")
            return False
        return 200 <= response.status_code < 300
