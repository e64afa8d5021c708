"""
Reusable OpenAPI Error Response Definitions

Pre-composed response dicts for use in FastAPI endpoint decorators.
Pass the set that matches an endpoint's error profile as ``responses=``.
"""

from ..models.error_models import (
    ErrorResponse,
    ValidationErrorResponse,
    RateLimitErrorResponse,
    ServiceErrorResponse,
)

# --- Individual response definitions ----------------------------------------

VALIDATION_ERROR_RESPONSE = {
    400: {"model": ValidationErrorResponse, "description": "Validation error"},
}

NOT_FOUND_RESPONSE = {
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

CONFLICT_RESPONSE = {
    409: {"model": ErrorResponse, "description": "Same request already in progress"},
}

RATE_LIMIT_RESPONSE = {
    429: {"model": RateLimitErrorResponse, "description": "Rate limit exceeded"},
}

INTERNAL_ERROR_RESPONSE = {
    500: {"model": ErrorResponse, "description": "Internal server error"},
}

EXTERNAL_SERVICE_RESPONSE = {
    502: {"model": ServiceErrorResponse, "description": "Upstream service error"},
}

# --- Composed sets for common endpoint patterns -----------------------------

STANDARD_ERRORS = {**RATE_LIMIT_RESPONSE, **INTERNAL_ERROR_RESPONSE}

VALIDATION_ERRORS = {**VALIDATION_ERROR_RESPONSE, **STANDARD_ERRORS}

RESOURCE_ERRORS = {**NOT_FOUND_RESPONSE, **VALIDATION_ERRORS}

UPSTREAM_ERRORS = {
    **VALIDATION_ERROR_RESPONSE,
    **CONFLICT_RESPONSE,
    **EXTERNAL_SERVICE_RESPONSE,
    **STANDARD_ERRORS,
}
