"""Local, zero-network heuristic scan.

Produces a coarse HeuristicHint from the pattern library. The hint gates the
remote classifier (no hint, no network call) and is the fallback signal when
the classifier is unavailable.

Priority order is a tie-break, not an accumulation:
    1. financial handle (UPI id)  -> upi / high
    2. URL                        -> link / medium
    3. >= 2 distinct keywords     -> keyword / medium
       1 keyword                  -> keyword / low
    4. nothing                    -> None
"""

from dataclasses import dataclass
from typing import List, Optional

from honeyguard import patterns


@dataclass(frozen=True)
class HeuristicHint:
    """Result of a local scan. Produced once per request, never mutated."""
    category: str
    severity: str
    rule: str = ""

    def __post_init__(self) -> None:
        if self.category not in patterns.VALID_CATEGORIES:
            raise ValueError(f"unknown hint category: {self.category}")
        if self.severity not in patterns.VALID_SEVERITIES:
            raise ValueError(f"unknown hint severity: {self.severity}")


class HeuristicScanner:
    """Walks the rule table, then falls back to keyword density."""

    def __init__(self, rules=None, keywords=None, keyword_severity=None) -> None:
        self.rules = list(rules if rules is not None else patterns.HINT_RULES)
        self.keywords = tuple(keywords if keywords is not None else patterns.KEYWORDS)
        self.keyword_severity = sorted(
            keyword_severity if keyword_severity is not None else patterns.KEYWORD_SEVERITY,
            reverse=True,
        )

    def scan(self, text: Optional[str]) -> Optional[HeuristicHint]:
        if not text or not text.strip():
            return None
        lowered = text.lower()

        for name, pattern, category, severity in self.rules:
            if pattern.search(lowered):
                return HeuristicHint(category=category, severity=severity, rule=name)

        hits = len(self.matched_keywords(lowered))
        for minimum, severity in self.keyword_severity:
            if hits >= minimum:
                return HeuristicHint(category="keyword", severity=severity, rule="keywords")

        return None

    def matched_keywords(self, text: Optional[str]) -> List[str]:
        """Distinct keywords present in text (case-insensitive substring test)."""
        if not text:
            return []
        lowered = text.lower()
        return [kw for kw in self.keywords if kw in lowered]


# Module-level singleton
scanner = HeuristicScanner()
