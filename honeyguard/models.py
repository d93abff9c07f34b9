"""Pydantic request/response models for the HoneyGuard API."""

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from typing import List, Literal, Optional, Union


Decision = Literal["safe", "review", "warning", "autonomous_engaged"]

HIGH_SEVERITY_SCORE: float = 0.7
ELEVATED_SCORE: float = 0.4


class Message(BaseModel):
    """Single prior turn in a conversation."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    sender: Optional[str] = Field(default="scammer")
    text: str = Field(default="")
    timestamp: Optional[Union[str, int]] = Field(default=None)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value):
        """Scrapers send epoch ints; normalize to string."""
        if isinstance(value, (int, float)):
            return str(int(value))
        return value


class AnalysisRequest(BaseModel):
    """Incoming payload on POST /analyze. Immutable once built.

    autoMode is informational only: whether a reply is scheduled is decided
    by the server-side Settings.autoMode snapshot.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    text: Optional[str] = Field(default="")
    sessionId: str = Field(default="unknown")
    conversationHistory: List[Message] = Field(default_factory=list)
    autoMode: bool = Field(default=False)

    @field_validator("text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""


class Settings(BaseModel):
    """Read-only per-request snapshot of the user's options."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    autoMode: bool = False
    apiUrl: str = "http://localhost:3000"
    apiKey: str = ""
    persona: str = "default"


class Verdict(BaseModel):
    """Final outcome of analysing one message.

    A reply is attached only when the pipeline chose autonomous engagement.
    Verdicts are frozen so the cache can hand the same object to every caller.
    """

    model_config = ConfigDict(frozen=True)

    decision: Decision = Field(...)
    score: float = Field(..., ge=0.0, le=1.0)
    reply: Optional[str] = Field(default=None)
    degraded: bool = Field(default=False)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Verdict":
        if (self.reply is not None) != (self.decision == "autonomous_engaged"):
            raise ValueError("reply must be present exactly when decision is autonomous_engaged")
        if self.decision == "safe" and self.score > 0.1:
            raise ValueError("safe verdicts cannot score above 0.1")
        return self

    @property
    def severity(self) -> str:
        if self.score > HIGH_SEVERITY_SCORE:
            return "high"
        if self.score > ELEVATED_SCORE:
            return "elevated"
        return "safe"

    @property
    def flagged(self) -> bool:
        """True when the message should be marked in the chat UI."""
        return self.score > ELEVATED_SCORE or self.decision != "safe"

    @property
    def label(self) -> str:
        if not self.flagged:
            return ""
        return "Scam Detected" if self.severity == "high" else "Suspicious"


class InjectionCommand(BaseModel):
    """Tells the scraping side to type `text` into the active chat."""

    action: Literal["injectReply"] = "injectReply"
    text: str
    sessionId: str


class Stats(BaseModel):
    messagesScanned: int = 0
    scamsDetected: int = 0


# API-only payloads

class ChatSwitchRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(...)


class ChatSwitchResponse(BaseModel):
    sessionId: str


class ChatMessageRequest(BaseModel):
    """A message scraped from the currently open chat."""

    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = Field(default="")
    conversationHistory: List[Message] = Field(default_factory=list)


class ChatMessageResponse(BaseModel):
    skipped: bool = False
    sessionId: str
    verdict: Optional[Verdict] = None
    label: str = ""


class ProbeResponse(BaseModel):
    connected: bool
    apiUrl: str
