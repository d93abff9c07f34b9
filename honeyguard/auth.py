"""Service authentication for the scraping collaborator.

Every endpoint except the health check expects the shared key from the
API_KEY environment variable in the x-api-key header.
"""

import secrets

from fastapi import Security, HTTPException, status
from fastapi.security import APIKeyHeader

from honeyguard import config

API_KEY_NAME = "x-api-key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)) -> str:
    """Reject the request with 401 unless the header carries the service key."""
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing API key. Send it in the '{API_KEY_NAME}' header.",
        )

    # constant-time comparison
    if not secrets.compare_digest(api_key.encode(), config.SERVICE_API_KEY.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
        )

    return api_key
