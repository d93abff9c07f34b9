"""Static pattern definitions shared by the scanner and the redactor.

Everything here is data. The scanner walks HINT_RULES in order, so a new
rule only needs a new row in the table:

    (name, compiled pattern, category, severity)

Keyword detection is a plain substring test against KEYWORDS, not a regex.
All matching happens on lower-cased text.
"""

import re
from typing import List, Pattern, Tuple


# Known UPI provider handles (the part after '@' in a VPA)
UPI_PROVIDERS: Tuple[str, ...] = (
    "paytm", "ybl", "okaxis", "oksbi", "axl", "ibl", "upi", "okhdfcbank",
    "okicici", "barodampay", "idbi", "aubank", "axisbank", "bandhan",
    "federal", "hdfcbank", "icici", "indus", "kbl", "kotak", "paywiz", "rbl",
    "sbi", "sc", "sib", "uco", "unionbank", "yesbank",
)

# Financial handle: alphanumeric local part + known provider suffix
UPI_ID: Pattern = re.compile(
    r'[a-z0-9.\-_]{2,256}@(?:' + '|'.join(UPI_PROVIDERS) + r')',
    re.IGNORECASE,
)

# Long digit runs plausible as bank account numbers
BANK_ACCOUNT: Pattern = re.compile(r'\b\d{9,18}\b')

# Indian mobile: optional +91, 91 or trunk 0 prefix, leading 6-9, ten digits.
# Digit-bounded on both sides so the prefix is consumed with the number and a
# longer digit run is never partially matched.
PHONE_NUMBER: Pattern = re.compile(r'(?<!\d)(?:\+?91[\-\s]?|0)?[6-9]\d{9}(?!\d)')

PHISHING_LINK: Pattern = re.compile(
    r'https?://(?:www\.)?[-a-z0-9@:%._+~#=]{1,256}\.[a-z0-9()]{1,6}\b'
    r'(?:[-a-z0-9()@:%_+.~#?&/=]*)',
    re.IGNORECASE,
)

EMAIL_ADDRESS: Pattern = re.compile(r'[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}')

PHONE_PLACEHOLDER: str = "[PHONE_REDACTED]"
EMAIL_PLACEHOLDER: str = "[EMAIL_REDACTED]"

# Urgency, authority impersonation, financial and distress vocabulary
KEYWORDS: Tuple[str, ...] = (
    # urgency / account pressure
    "blocked", "suspended", "verify", "kyc", "urgency", "urgent", "immediate",
    "expire", "lapse",
    # lures
    "refund", "lottery", "winner", "prize",
    # credentials and cards
    "password", "otp", "pin", "cvv", "atm card", "credit card", "debit card",
    "click here", "link",
    # authority / legal threats
    "police", "arrest", "jail", "cbi", "customs", "fbi", "income tax", "seized",
    "drugs", "illegal",
    # distress / self-harm
    "suicide", "died", "killed", "accident", "hospital",
)

# Ordered rule table: first match wins
HINT_RULES: List[Tuple[str, Pattern, str, str]] = [
    ("upi_id",        UPI_ID,        "upi",  "high"),
    ("phishing_link", PHISHING_LINK, "link", "medium"),
]

# Keyword fallback: (minimum distinct hits, severity), highest first
KEYWORD_SEVERITY: List[Tuple[int, str]] = [
    (2, "medium"),
    (1, "low"),
]

VALID_CATEGORIES = frozenset(["upi", "link", "keyword"])
VALID_SEVERITIES = frozenset(["low", "medium", "high"])
