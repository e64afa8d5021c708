"""
Request/Response Logging Middleware

Logs every API call with:
- Correlation ID (X-Request-ID), generated when the client sends none
- Filtered request body and headers
- Status, duration and slow-request warnings
"""

import logging
import time
import json
import uuid
import re
import os
from typing import Callable, Optional, Dict, Any
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from starlette.datastructures import Headers

logger = logging.getLogger(__name__)


# Sensitive field patterns to filter from logs
SENSITIVE_FIELDS = {
    'password', 'secret', 'token', 'api_key', 'apikey', 'authorization',
    'private_key', 'privatekey', 'mnemonic', 'seed', 'signature', 'cookie'
}

# Sensitive header patterns
SENSITIVE_HEADERS = {
    'authorization', 'cookie', 'x-api-key', 'x-auth-token'
}

# Paths to exclude from detailed logging
EXCLUDE_PATHS = {
    '/docs', '/redoc', '/openapi.json', '/favicon.ico'
}

MAX_BODY_SIZE = int(os.getenv('LOG_MAX_BODY_SIZE', 10000))  # 10KB default


def filter_sensitive_data(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask sensitive values in dicts and lists.

    Wallet addresses are public and are left as-is; keys and signatures
    are not.
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        filtered = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(pattern in key_lower for pattern in SENSITIVE_FIELDS):
                filtered[key] = "***FILTERED***"
            else:
                filtered[key] = filter_sensitive_data(value, depth + 1)
        return filtered

    elif isinstance(data, list):
        return [filter_sensitive_data(item, depth + 1) for item in data]

    elif isinstance(data, str):
        # Long opaque strings look like secrets; 0x addresses are 42 chars
        if len(data) > 50 and re.match(r'^[A-Za-z0-9_\-\.]+$', data):
            return f"{data[:10]}...{data[-10:]}"
        return data

    return data


def filter_headers(headers: Headers) -> Dict[str, str]:
    filtered = {}
    for key, value in headers.items():
        key_lower = key.lower()
        if any(pattern in key_lower for pattern in SENSITIVE_HEADERS):
            filtered[key] = "***FILTERED***"
        else:
            filtered[key] = value
    return filtered


def parse_body(body: bytes, content_type: Optional[str] = None) -> Any:
    """Parse a request body for logging, filtering JSON and truncating text"""
    if not body:
        return None

    if len(body) > MAX_BODY_SIZE:
        return f"[BODY_TOO_LARGE: {len(body)} bytes]"

    text = body.decode('utf-8', errors='ignore')
    try:
        return filter_sensitive_data(json.loads(text))
    except json.JSONDecodeError:
        pass

    if len(text) > 500:
        return f"{text[:500]}... [TRUNCATED]"
    return text


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for HTTP request/response logging.

    Configuration via environment variables:
    - LOG_MAX_BODY_SIZE: Maximum body size to log in bytes (default: 10000)
    - LOG_SLOW_REQUEST_THRESHOLD: Slow request warning threshold in ms (default: 5000)
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        log_responses: bool = True,
        log_request_body: bool = True
    ):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_request_body = log_request_body
        # LLM round-trips routinely take a few seconds
        self.slow_request_threshold = int(
            os.getenv('LOG_SLOW_REQUEST_THRESHOLD', 5000)
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))
        request.state.request_id = request_id

        path = request.url.path
        if path in EXCLUDE_PATHS:
            response = await call_next(request)
            response.headers['X-Request-ID'] = request_id
            return response

        start_time = time.time()
        method = request.method
        session_id = request.headers.get('X-Session-ID')

        request_body = None
        request_size = 0
        if self.log_request_body and method in ('POST', 'PUT', 'PATCH'):
            try:
                body_bytes = await request.body()
                request_size = len(body_bytes)
                request_body = parse_body(body_bytes, request.headers.get('content-type'))
            except Exception as e:
                logger.warning(
                    f"Failed to read request body: {e}",
                    extra={'request_id': request_id}
                )

        if self.log_requests:
            request_log_data = {
                'request_id': request_id,
                'method': method,
                'path': path,
                'query_params': filter_sensitive_data(dict(request.query_params)),
                'client_host': request.client.host if request.client else "unknown",
                'request_size': request_size,
                'headers': filter_headers(request.headers),
            }
            if session_id:
                request_log_data['session_id'] = session_id
            if request_body is not None:
                request_log_data['request_body'] = request_body

            logger.info(f"-> {method} {path}", extra=request_log_data)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = (time.time() - start_time) * 1000
            logger.error(
                f"{method} {path} - Request failed: {type(e).__name__}",
                extra={
                    'request_id': request_id,
                    'path': path,
                    'duration_ms': round(duration, 2),
                    'error_type': type(e).__name__,
                },
                exc_info=True
            )
            raise

        duration = (time.time() - start_time) * 1000
        response.headers['X-Request-ID'] = request_id
        response.headers['X-Process-Time'] = f"{duration:.2f}ms"

        status_code = response.status_code
        if status_code >= 500:
            log_level = logging.ERROR
        elif status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        if self.log_responses:
            logger.log(
                log_level,
                f"<- {method} {path} - {status_code} ({duration:.2f}ms)",
                extra={
                    'request_id': request_id,
                    'path': path,
                    'status_code': status_code,
                    'duration_ms': round(duration, 2),
                }
            )

        if duration > self.slow_request_threshold:
            logger.warning(
                f"Slow request: {method} {path} took {duration:.2f}ms",
                extra={
                    'request_id': request_id,
                    'path': path,
                    'duration_ms': round(duration, 2),
                    'threshold_ms': self.slow_request_threshold
                }
            )

        return response
