"""
HoneyGuard: chat message risk analysis package
=============================================

    - main.py       : FastAPI application and endpoint wiring
    - auth.py       : x-api-key authentication
    - cache.py      : bounded LRU/TTL verdict cache
    - classifier.py : HTTP client for the hosted classifier
    - config.py     : .env / environment configuration
    - engine.py     : stage A-D decision pipeline
    - models.py     : Pydantic request/response schemas
    - outbox.py     : pending reply-injection commands
    - patterns.py   : regex and keyword rule table
    - redactor.py   : phone/email redaction
    - scanner.py    : local heuristic scan
    - scheduler.py  : jittered, cancellable auto-replies
    - sessions.py   : active chat tracking and per-view dedup
    - stats.py      : scanned/detected counters
"""
