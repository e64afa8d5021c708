"""
Rate Limiting Configuration

Per-client rate limits for the DefiBuddy API. LLM-backed and
explorer-backed endpoints cost real money upstream, so they get the
strictest preset.

Uses slowapi with in-memory or Redis storage.
"""

import os
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

logger = logging.getLogger(__name__)


RATE_LIMIT_ENABLED = os.getenv('RATE_LIMIT_ENABLED', 'true').lower() == 'true'
RATE_LIMIT_STORAGE_URL = os.getenv('RATE_LIMIT_STORAGE_URL', 'memory://')  # or redis://localhost:6379
RATE_LIMIT_STRATEGY = os.getenv('RATE_LIMIT_STRATEGY', 'fixed-window')

DEFAULT_RATE_LIMIT = os.getenv('DEFAULT_RATE_LIMIT', '100/minute')
EXPENSIVE_RATE_LIMIT = os.getenv('EXPENSIVE_RATE_LIMIT', '10/minute')


def get_identifier(request: Request) -> str:
    """
    Get rate limit identifier for the request.

    Uses the client session id when the browser sends one, otherwise
    the remote address.
    """
    session_id = request.headers.get('X-Session-ID')
    if session_id:
        return f"session:{session_id[:64]}"
    return get_remote_address(request)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key: client identifier + endpoint path."""
    return f"{get_identifier(request)}:{request.url.path}"


limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=RATE_LIMIT_STORAGE_URL,
    strategy=RATE_LIMIT_STRATEGY,
    enabled=RATE_LIMIT_ENABLED,
    headers_enabled=True,
)


class RateLimits:
    """
    Predefined rate limits for different endpoint types.

    Usage:
        @router.post("/lookup")
        @limiter.limit(RateLimits.EXPENSIVE)
        async def lookup(request: Request, response: Response, ...):
            ...
    """

    # LLM and block-explorer calls
    EXPENSIVE = EXPENSIVE_RATE_LIMIT

    # Public API endpoints
    PUBLIC_API = DEFAULT_RATE_LIMIT

    # History and ledger reads
    READ_ONLY = '500/minute'

    # Buddy and metadata writes
    WRITE = '50/minute'


def get_rate_limit_config() -> dict:
    """Current rate limit configuration, for diagnostics."""
    return {
        'enabled': RATE_LIMIT_ENABLED,
        'storage_url': RATE_LIMIT_STORAGE_URL,
        'strategy': RATE_LIMIT_STRATEGY,
        'limits': {
            'default': DEFAULT_RATE_LIMIT,
            'expensive': EXPENSIVE_RATE_LIMIT,
            'read_only': RateLimits.READ_ONLY,
            'write': RateLimits.WRITE,
        },
    }
