"""
Error Code Documentation Endpoint

Exposes the ERROR_CODES registry so clients can discover every error
code the API may return.
"""

from fastapi import APIRouter, Request, Response
import logging

from ..exceptions import ERROR_CODES
from ..config.rate_limit_config import limiter, RateLimits

logger = logging.getLogger(__name__)

router = APIRouter()

_EXAMPLE_RESPONSES = {
    "VALIDATION_ERROR": {
        "error": "VALIDATION_ERROR",
        "message": "Invalid Ethereum address format",
        "status_code": 400,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "path": "/api/wallet/lookup",
        "details": {"address": "0x123", "reason": "Expected 0x followed by 40 hex characters"},
    },
    "RESOURCE_NOT_FOUND": {
        "error": "RESOURCE_NOT_FOUND",
        "message": "Buddy not found: 42",
        "status_code": 404,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "path": "/api/buddies/42",
        "details": {"resource_type": "Buddy", "resource_id": "42"},
    },
    "CONFLICT": {
        "error": "CONFLICT",
        "message": "A personality-lookup request is already in progress",
        "status_code": 409,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "path": "/api/crypto/lookup",
        "details": {"action": "personality-lookup"},
    },
    "DEPLOYMENT_ERROR": {
        "error": "DEPLOYMENT_ERROR",
        "message": "Insufficient ETH for gas while swapping UNI",
        "status_code": 422,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "details": {"symbol": "UNI"},
    },
    "RATE_LIMIT_EXCEEDED": {
        "error": "RATE_LIMIT_EXCEEDED",
        "message": "Rate limit exceeded: 10 per 1 minute",
        "status_code": 429,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "retry_after": 45,
        "limit": "10/minute",
    },
    "INTERNAL_ERROR": {
        "error": "INTERNAL_ERROR",
        "message": "Internal server error",
        "status_code": 500,
        "timestamp": "2026-01-25T12:34:56.789Z",
    },
    "EXTERNAL_SERVICE_ERROR": {
        "error": "EXTERNAL_SERVICE_ERROR",
        "message": "Database operation failed: add buddy",
        "status_code": 502,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "service": "database",
    },
    "UPSTREAM_UNAVAILABLE": {
        "error": "UPSTREAM_UNAVAILABLE",
        "message": "Failed to fetch pool data",
        "status_code": 502,
        "timestamp": "2026-01-25T12:34:56.789Z",
        "service": "defillama",
    },
}


def _categorize(status_code: int) -> str:
    if 400 <= status_code < 500:
        return "client_error"
    return "server_error"


@router.get("/codes")
@limiter.limit(RateLimits.PUBLIC_API)
def get_error_codes(request: Request, response: Response):
    """
    List all error codes the API may return.

    **Returns:**
    - error_codes: Description, status code, suggested user action and example body per code
    - by_status_code: Codes grouped into 4xx client / 5xx server buckets
    - total_codes: Number of registered error codes
    """
    error_codes = {}
    client_errors = []
    server_errors = []

    for code, info in ERROR_CODES.items():
        category = _categorize(info["status_code"])
        error_codes[code] = {
            "code": code,
            "description": info["description"],
            "status_code": info["status_code"],
            "category": category,
            "user_action": info["user_action"],
            "example_response": _EXAMPLE_RESPONSES.get(code, {}),
        }

        if category == "client_error":
            client_errors.append(code)
        else:
            server_errors.append(code)

    return {
        "error_codes": error_codes,
        "by_status_code": {
            "4xx_client_errors": client_errors,
            "5xx_server_errors": server_errors,
        },
        "total_codes": len(error_codes),
    }
