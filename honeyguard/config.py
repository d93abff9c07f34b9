"""Environment-driven configuration (loaded from .env when present).

Tunables are read once at import. User options (enabled, auto mode,
classifier URL/key, persona) are re-read on every request through
load_settings(), so nothing about them is cached between requests.
"""

import os
from dotenv import load_dotenv

from honeyguard.models import Settings

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw not in (None, "") else default
    except ValueError:
        return default


# Service auth for the scraping collaborator
SERVICE_API_KEY: str = os.getenv("API_KEY", "default-honeyguard-key")

# Remote classifier
CLASSIFIER_TIMEOUT_SECONDS: float = _env_float("CLASSIFIER_TIMEOUT_SECONDS", 10.0)
CLASSIFIER_SOURCE: str = os.getenv("CLASSIFIER_SOURCE", "whatsapp_web")

# Analysis cache
CACHE_CAPACITY: int = int(_env_float("CACHE_CAPACITY", 2000))
CACHE_SHORT_TTL_SECONDS: float = _env_float("CACHE_SHORT_TTL_SECONDS", 30.0)
CACHE_LONG_TTL_SECONDS: float = _env_float("CACHE_LONG_TTL_SECONDS", 1800.0)

# Auto-reply jitter (milliseconds)
REPLY_MIN_DELAY_MS: int = int(_env_float("REPLY_MIN_DELAY_MS", 2000))
REPLY_MAX_DELAY_MS: int = int(_env_float("REPLY_MAX_DELAY_MS", 6000))

# Pending injection commands kept for the collaborator to drain
OUTBOX_CAPACITY: int = int(_env_float("OUTBOX_CAPACITY", 100))


def load_settings() -> Settings:
    """Fresh snapshot of the user-facing options."""
    return Settings(
        enabled=_env_bool("HONEYGUARD_ENABLED", True),
        autoMode=_env_bool("HONEYGUARD_AUTO_MODE", False),
        apiUrl=os.getenv("CLASSIFIER_API_URL", "http://localhost:3000").rstrip("/"),
        apiKey=os.getenv("CLASSIFIER_API_KEY", ""),
        persona=os.getenv("HONEYGUARD_PERSONA", "") or "default",
    )
