"""
CORS Configuration for DefiBuddy

Environment-based CORS settings for the browser client.
"""

import os
import logging
from typing import List
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

logger = logging.getLogger(__name__)

DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5000",
    "http://127.0.0.1:5173",
]


def get_cors_origins() -> List[str]:
    """
    Get allowed CORS origins from the CORS_ORIGINS environment variable.

    Falls back to local development origins when unset.
    """
    origins_str = os.getenv('CORS_ORIGINS', '')

    if origins_str:
        origins = [origin.strip() for origin in origins_str.split(',') if origin.strip()]
        logger.info(f"CORS origins configured: {len(origins)} origins")
        return origins

    logger.warning(
        "CORS_ORIGINS not configured - using default localhost origins. "
        "Set CORS_ORIGINS environment variable for production!"
    )
    return list(DEFAULT_DEV_ORIGINS)


def is_production() -> bool:
    """Check if running in production environment"""
    env = os.getenv('ENVIRONMENT', 'development').lower()
    return env in ('production', 'prod')


def setup_cors(app: FastAPI) -> None:
    """
    Setup CORS middleware for the FastAPI application

    Raises:
        ValueError: If running in production with wildcard or malformed origins
    """
    origins = get_cors_origins()

    if is_production():
        if '*' in origins or not origins:
            error_msg = (
                "SECURITY ERROR: Wildcard CORS origins not allowed in production! "
                "Set CORS_ORIGINS environment variable to specific domains."
            )
            logger.critical(error_msg)
            raise ValueError(error_msg)

        for origin in origins:
            if not origin.startswith(('http://', 'https://')):
                raise ValueError(f"Invalid origin format: {origin}. Must start with http:// or https://")

    try:
        max_age = int(os.getenv('CORS_MAX_AGE', '600'))
    except ValueError:
        max_age = 600
        logger.warning("Invalid CORS_MAX_AGE value, using default: 600")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=os.getenv('CORS_ALLOW_CREDENTIALS', 'true').lower() == 'true',
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['*'],
        expose_headers=['X-Request-ID', 'X-Process-Time'],
        max_age=max_age,
    )

    logger.info(f"CORS middleware configured with {len(origins)} allowed origins")
