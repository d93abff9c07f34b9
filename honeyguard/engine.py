"""Per-message decision pipeline.

Stages run strictly in order:

    A  disabled   settings.enabled is false      -> safe / 0.0
    B  cache      fingerprint hit                -> cached Verdict (same object)
    C  fast-fail  no local hint                  -> safe / 0.1, no network
    D  remote     redact, call classifier
                    success                      -> review / 0.5
                    success + autoMode + reply   -> autonomous_engaged, reply scheduled
                    failure                      -> warning / 0.8, degraded

Scores are fixed constants: the classifier returns a reply, not a
confidence. Thresholds downstream are score > 0.7 high, > 0.4 elevated.

analyze() never raises. A classifier outage only lowers accuracy.
"""

import logging
from typing import Optional, Union

from honeyguard.cache import AnalysisCache, make_key
from honeyguard.classifier import ClassifierResult, ClassifierUnavailable, RemoteClassifier
from honeyguard.models import AnalysisRequest, Settings, Verdict
from honeyguard.redactor import contains_pii, redact, redact_history, safe_preview
from honeyguard.scanner import HeuristicHint, HeuristicScanner, scanner as default_scanner
from honeyguard.scheduler import AutoReplyScheduler
from honeyguard.stats import StatsRecorder

logger = logging.getLogger(__name__)


DISABLED_SCORE: float = 0.0
FAST_FAIL_SCORE: float = 0.1
REMOTE_BASE_SCORE: float = 0.5
FALLBACK_SCORE: float = 0.8

ClassifierOutcome = Union[ClassifierResult, ClassifierUnavailable, None]


class DecisionEngine:

    def __init__(
        self,
        cache: AnalysisCache,
        classifier: RemoteClassifier,
        scheduler: AutoReplyScheduler,
        stats: StatsRecorder,
        scanner: Optional[HeuristicScanner] = None,
    ) -> None:
        self.cache = cache
        self.classifier = classifier
        self.scheduler = scheduler
        self.stats = stats
        self.scanner = scanner or default_scanner

    def analyze(self, request: AnalysisRequest, settings: Settings) -> Verdict:
        session_id = request.sessionId
        short_id = session_id[:8]

        # Stage A
        if not settings.enabled:
            return self.decide(request, None, settings, None)

        # Stage B
        key = make_key(session_id, request.text)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"[{short_id}] CACHE HIT decision={cached.decision}")
            return cached

        # Stage C
        hint = self.scanner.scan(request.text)
        if hint is None:
            verdict = self.decide(request, None, settings, None)
            self.cache.put(key, verdict)
            return verdict

        # Stage D
        outcome = self._classify(request, settings)
        verdict = self.decide(request, hint, settings, outcome)

        self.stats.increment("messagesScanned")
        if verdict.decision == "autonomous_engaged":
            self.stats.increment("scamsDetected")
            self._schedule_reply(session_id, verdict.reply)

        self.cache.put(key, verdict)
        logger.info(
            f"[{short_id}] VERDICT decision={verdict.decision} score={verdict.score} "
            f"hint={hint.category}/{hint.severity} degraded={verdict.degraded} "
            f"text='{safe_preview(request.text)}'"
        )
        return verdict

    def decide(
        self,
        request: AnalysisRequest,
        hint: Optional[HeuristicHint],
        settings: Settings,
        outcome: ClassifierOutcome,
    ) -> Verdict:
        """Combine settings, local hint and classifier outcome into a verdict.

        Side-effect free; analyze() owns caching, stats and scheduling.
        """
        if not settings.enabled:
            return Verdict(decision="safe", score=DISABLED_SCORE)

        if hint is None:
            # A failed call with no local signal is never escalated
            return Verdict(decision="safe", score=FAST_FAIL_SCORE)

        if not isinstance(outcome, ClassifierResult):
            return Verdict(decision="warning", score=FALLBACK_SCORE, degraded=True)

        if settings.autoMode and outcome.has_reply:
            return Verdict(
                decision="autonomous_engaged",
                score=REMOTE_BASE_SCORE,
                reply=outcome.reply,
            )
        return Verdict(decision="review", score=REMOTE_BASE_SCORE)

    def _classify(self, request: AnalysisRequest, settings: Settings) -> ClassifierOutcome:
        short_id = request.sessionId[:8]
        if contains_pii(request.text):
            logger.debug(f"[{short_id}] PII masked before classifier call")
        try:
            return self.classifier.classify(
                redact(request.text),
                request.sessionId,
                redact_history(request.conversationHistory),
                settings,
            )
        except ClassifierUnavailable as exc:
            logger.warning(f"[{short_id}] Classifier unavailable, using local hint: {exc}")
            return exc
        except Exception as exc:
            logger.error(f"[{short_id}] Unexpected classifier error: {exc}", exc_info=True)
            return ClassifierUnavailable(str(exc))

    def _schedule_reply(self, session_id: str, reply: str) -> None:
        if not self.scheduler.is_live(session_id):
            logger.info(f"[{session_id[:8]}] Chat changed during analysis, auto-reply suppressed")
            return
        self.scheduler.schedule(session_id, reply)
