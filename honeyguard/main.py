"""FastAPI entry point. Wires scan -> redact -> classify -> decide -> auto-reply
for messages scraped from the open chat. Exposes GET / (health) plus the
analysis, chat-tracking, injection, stats and probe endpoints."""

import logging
from typing import List

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from honeyguard import config
from honeyguard.auth import verify_api_key
from honeyguard.cache import AnalysisCache
from honeyguard.classifier import RemoteClassifier
from honeyguard.engine import DecisionEngine
from honeyguard.models import (
    AnalysisRequest,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatSwitchRequest,
    ChatSwitchResponse,
    InjectionCommand,
    ProbeResponse,
    Stats,
    Verdict,
)
from honeyguard.outbox import InjectionOutbox
from honeyguard.scheduler import AutoReplyScheduler
from honeyguard.sessions import ConversationTracker
from honeyguard.stats import stats

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

outbox = InjectionOutbox(
    capacity=config.OUTBOX_CAPACITY,
    is_live=lambda session_id: tracker.is_live(session_id),
)


def _retire_session(session_id: str) -> None:
    scheduler.cancel(session_id)
    outbox.discard(session_id)


tracker = ConversationTracker(on_retire=_retire_session)
scheduler = AutoReplyScheduler(
    injector=outbox.push,
    is_live=tracker.is_live,
    min_delay_ms=config.REPLY_MIN_DELAY_MS,
    max_delay_ms=config.REPLY_MAX_DELAY_MS,
)
cache = AnalysisCache(
    capacity=config.CACHE_CAPACITY,
    short_ttl=config.CACHE_SHORT_TTL_SECONDS,
    long_ttl=config.CACHE_LONG_TTL_SECONDS,
)
classifier = RemoteClassifier(
    timeout=config.CLASSIFIER_TIMEOUT_SECONDS,
    source=config.CLASSIFIER_SOURCE,
)
engine = DecisionEngine(cache=cache, classifier=classifier, scheduler=scheduler, stats=stats)

app = FastAPI(
    title="HoneyGuard API",
    description="Chat message risk analysis with optional decoy auto-replies",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _on_startup() -> None:
    settings = config.load_settings()
    logger.info(
        f"HoneyGuard API v{VERSION} started | classifier={settings.apiUrl} "
        f"enabled={settings.enabled} autoMode={settings.autoMode}"
    )


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    cancelled = scheduler.cancel_all()
    if cancelled:
        logger.info(f"Cancelled {cancelled} pending auto-replies on shutdown")


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error(f"422 VALIDATION ERROR | {request.url.path} | {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(), "message": "Invalid request payload."},
    )


@app.get("/")
async def health_check() -> dict:
    return {
        "status": "online",
        "service": "HoneyGuard API",
        "version": VERSION,
    }


def _run_analysis(request: AnalysisRequest) -> Verdict:
    """Run the pipeline with a fresh settings snapshot. Always returns a verdict."""
    try:
        return engine.analyze(request, config.load_settings())
    except Exception as exc:
        logger.error(
            f"[{request.sessionId[:8]}] Unhandled error in analysis: {exc}",
            exc_info=True,
        )
        return Verdict(decision="safe", score=0.0, degraded=True)


@app.post("/analyze", response_model=Verdict, response_model_exclude_none=True)
def analyze_message(
    request: AnalysisRequest,
    api_key: str = Depends(verify_api_key),
) -> Verdict:
    """Analyse one message for an explicit session id."""
    return _run_analysis(request)


@app.post("/chat/switch", response_model=ChatSwitchResponse)
def switch_chat(
    request: ChatSwitchRequest,
    api_key: str = Depends(verify_api_key),
) -> ChatSwitchResponse:
    """The user opened another chat: new session, pending replies dropped."""
    return ChatSwitchResponse(sessionId=tracker.switch_chat(request.title))


@app.post("/chat/message", response_model=ChatMessageResponse, response_model_exclude_none=True)
def chat_message(
    request: ChatMessageRequest,
    api_key: str = Depends(verify_api_key),
) -> ChatMessageResponse:
    """Analyse a message from the open chat, skipping ones already seen."""
    session_id = tracker.active or "unknown"
    text = request.text or ""

    if not tracker.claim_message(text):
        return ChatMessageResponse(skipped=True, sessionId=session_id)

    verdict = _run_analysis(
        AnalysisRequest(
            text=text,
            sessionId=session_id,
            conversationHistory=request.conversationHistory,
        )
    )
    return ChatMessageResponse(sessionId=session_id, verdict=verdict, label=verdict.label)


@app.get("/injections", response_model=List[InjectionCommand])
def drain_injections(api_key: str = Depends(verify_api_key)) -> List[InjectionCommand]:
    return outbox.drain()


@app.get("/stats", response_model=Stats)
def get_stats(api_key: str = Depends(verify_api_key)) -> Stats:
    return stats.snapshot()


@app.get("/probe", response_model=ProbeResponse)
def probe_classifier(api_key: str = Depends(verify_api_key)) -> ProbeResponse:
    settings = config.load_settings()
    return ProbeResponse(connected=classifier.probe(settings), apiUrl=settings.apiUrl)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
