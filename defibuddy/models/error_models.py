"""
Error Response Models

Standardized error response bodies shared by every DefiBuddy endpoint.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class ErrorDetail(BaseModel):
    """Field-level error information."""

    field: Optional[str] = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    type: Optional[str] = Field(None, description="Error type")


class ErrorResponse(BaseModel):
    """
    Standardized error response model.

    Used for all API errors to provide consistent error format.
    """

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": "VALIDATION_ERROR",
            "message": "Invalid Ethereum address format",
            "status_code": 400,
            "timestamp": "2026-01-25T12:34:56.789Z",
            "path": "/api/wallet/lookup",
            "request_id": "req_abc123",
            "details": {"address": "0x123", "reason": "Expected 0x followed by 40 hex characters"}
        }
    })

    error: str = Field(..., description="Error type/code")
    message: str = Field(..., description="Human-readable error message")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: str = Field(
        default_factory=lambda: datetime.utcnow().isoformat(),
        description="Error timestamp (ISO 8601)"
    )
    path: Optional[str] = Field(None, description="Request path that caused error")
    request_id: Optional[str] = Field(None, description="Unique request identifier")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ValidationErrorResponse(ErrorResponse):
    """Validation error response with field-level errors (400)."""

    error: str = Field(default="VALIDATION_ERROR")
    validation_errors: List[ErrorDetail] = Field(
        default_factory=list,
        description="List of validation errors"
    )


class RateLimitErrorResponse(ErrorResponse):
    """Rate limit error response (429)."""

    error: str = Field(default="RATE_LIMIT_EXCEEDED")
    retry_after: Optional[int] = Field(None, description="Seconds to wait before retrying")
    limit: Optional[str] = Field(None, description="Rate limit that was exceeded")


class ServiceErrorResponse(ErrorResponse):
    """Upstream service error response (502)."""

    error: str = Field(default="EXTERNAL_SERVICE_ERROR")
    service: Optional[str] = Field(None, description="Service that failed")


class ErrorResponseBuilder:
    """
    Builder for creating standardized error responses.
    """

    @staticmethod
    def build(
        error_code: str,
        message: str,
        status_code: int,
        path: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> ErrorResponse:
        """Build standard error response."""
        return ErrorResponse(
            error=error_code,
            message=message,
            status_code=status_code,
            path=path,
            request_id=request_id,
            details=details
        )

    @staticmethod
    def build_validation_error(
        message: str,
        validation_errors: List[ErrorDetail],
        path: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> ValidationErrorResponse:
        """
        Build validation error response.

        The top-level message is the first field error when there is exactly
        one, so single-field mistakes read naturally in the UI.
        """
        if len(validation_errors) == 1:
            message = validation_errors[0].message

        return ValidationErrorResponse(
            message=message,
            status_code=400,
            path=path,
            request_id=request_id,
            validation_errors=validation_errors
        )

    @staticmethod
    def build_rate_limit_error(
        limit: str,
        retry_after: Optional[int] = None,
        path: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> RateLimitErrorResponse:
        """Build rate limit error response."""
        message = f"Rate limit exceeded: {limit}"
        if retry_after:
            message += f". Retry after {retry_after} seconds"

        return RateLimitErrorResponse(
            message=message,
            status_code=429,
            path=path,
            request_id=request_id,
            retry_after=retry_after,
            limit=limit
        )
