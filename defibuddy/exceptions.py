"""
Custom Exceptions for DefiBuddy API

Provides structured error handling with detailed error messages,
error codes, and proper HTTP status codes.
"""

from typing import Any, Dict, List, Optional


class DefiBuddyException(Exception):
    """
    Base exception for DefiBuddy.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Input Validation Errors (400)
class ValidationError(DefiBuddyException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class InvalidAddressError(ValidationError):
    """Raised when a wallet address does not match 0x + 40 hex characters."""

    def __init__(self, address: str, reason: Optional[str] = None):
        super().__init__(
            message="Invalid Ethereum address format",
            details={"address": address, "reason": reason}
        )


class InvalidWeightError(ValidationError):
    """Raised when a normalization weight is negative or not a finite number."""

    def __init__(self, index: int, value: Any):
        super().__init__(
            message=f"Invalid weight at position {index}: {value!r}",
            details={"index": index, "value": str(value)}
        )


class InvalidParameterError(ValidationError):
    """Raised when request parameter is invalid."""

    def __init__(self, parameter: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid parameter '{parameter}': {reason}",
            details={
                "parameter": parameter,
                "value": str(value),
                "reason": reason
            }
        )


# Resource Not Found Errors (404)
class ResourceNotFoundError(DefiBuddyException):
    """Raised when requested resource doesn't exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found: {resource_id}"

        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            status_code=404,
            details={
                "resource_type": resource_type,
                "resource_id": str(resource_id)
            }
        )


class BuddyNotFoundError(ResourceNotFoundError):
    """Raised when a buddy row doesn't exist."""

    def __init__(self, buddy_id: int):
        super().__init__(resource_type="Buddy", resource_id=buddy_id)


class MetadataNotFoundError(ResourceNotFoundError):
    """Raised when an NFT metadata snapshot doesn't exist."""

    def __init__(self, metadata_id: int):
        super().__init__(resource_type="NFT metadata", resource_id=metadata_id)


# Conflict Errors (409)
class ConflictError(DefiBuddyException):
    """Raised when request conflicts with existing state."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=409,
            details=details
        )


class RequestInFlightError(ConflictError):
    """Raised when the same action is submitted again while still pending."""

    def __init__(self, action: str):
        super().__init__(
            message=f"A {action} request is already in progress",
            details={"action": action}
        )


# External Service Errors (502)
class ExternalServiceError(DefiBuddyException):
    """Raised when an external service (API, database) fails."""

    def __init__(
        self,
        service: str,
        message: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        if not message:
            message = f"External service error: {service}"

        details = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message=message,
            error_code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details=details
        )


class UpstreamUnavailableError(ExternalServiceError):
    """Raised when a third-party API is down, rate-limited or unreachable."""

    def __init__(
        self,
        service: str,
        original_error: Optional[Exception] = None,
        message: Optional[str] = None
    ):
        super().__init__(
            service=service,
            message=message or f"{service} is unavailable, please try again later",
            original_error=original_error
        )
        self.error_code = "UPSTREAM_UNAVAILABLE"


class UpstreamDataInvalidError(ExternalServiceError):
    """
    Raised when a third-party response does not match the expected schema.

    Lookup adapters catch this and degrade to an empty result.
    """

    def __init__(self, service: str, errors: Optional[List[str]] = None):
        super().__init__(
            service=service,
            message=f"Unexpected response format from {service}"
        )
        self.error_code = "UPSTREAM_DATA_INVALID"
        self.details["errors"] = errors or []


class DatabaseError(ExternalServiceError):
    """Raised when database operation fails."""

    def __init__(
        self,
        operation: str,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            service="database",
            message=f"Database operation failed: {operation}",
            original_error=original_error
        )


# Blockchain transaction errors
class DeploymentError(DefiBuddyException):
    """Base class for swap and mint failures reported by a chain gateway."""

    def __init__(
        self,
        message: str,
        error_code: str = "DEPLOYMENT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=422,
            details=details
        )


class TransactionRejectedError(DeploymentError):
    """Raised when the wallet owner declines a signature prompt."""

    def __init__(self, message: str = "Transaction rejected by user"):
        super().__init__(message=message, error_code="TRANSACTION_REJECTED")


class GasEstimationError(DeploymentError):
    """Raised when a swap's gas cannot be estimated (e.g. no liquidity)."""

    def __init__(self, symbol: str, reason: Optional[str] = None):
        super().__init__(
            message=f"Could not estimate gas for {symbol}",
            error_code="GAS_ESTIMATION_FAILED",
            details={"symbol": symbol, "reason": reason}
        )


class InsufficientGasError(DeploymentError):
    """Raised when the margin-adjusted gas cost exceeds the wallet balance."""

    def __init__(self, symbol: str, gas_cost_wei: int, balance_wei: int):
        super().__init__(
            message=(
                f"Not enough ETH for gas: the {symbol} swap needs "
                f"~{gas_cost_wei / 10**18:.6f} ETH"
            ),
            error_code="INSUFFICIENT_GAS",
            details={
                "symbol": symbol,
                "gas_cost_wei": str(gas_cost_wei),
                "balance_wei": str(balance_wei)
            }
        )


class SwapFailedError(DeploymentError):
    """Raised when a submitted swap reverts or is dropped."""

    def __init__(self, symbol: str, reason: Optional[str] = None):
        super().__init__(
            message=f"Swap failed for {symbol}" + (f": {reason}" if reason else ""),
            error_code="SWAP_FAILED",
            details={"symbol": symbol, "reason": reason}
        )


# Error Code Registry
ERROR_CODES = {
    "VALIDATION_ERROR": {
        "description": "Input validation failed",
        "status_code": 400,
        "user_action": "Check request parameters and try again"
    },
    "RESOURCE_NOT_FOUND": {
        "description": "Requested resource not found",
        "status_code": 404,
        "user_action": "Verify resource identifier and try again"
    },
    "CONFLICT": {
        "description": "Request conflicts with a pending action",
        "status_code": 409,
        "user_action": "Wait for the pending request to finish"
    },
    "DEPLOYMENT_ERROR": {
        "description": "Blockchain transaction could not be completed",
        "status_code": 422,
        "user_action": "Check wallet balance and network, then retry"
    },
    "RATE_LIMIT_EXCEEDED": {
        "description": "Too many requests",
        "status_code": 429,
        "user_action": "Wait and retry after specified time"
    },
    "INTERNAL_ERROR": {
        "description": "Internal server error",
        "status_code": 500,
        "user_action": "Contact support if error persists"
    },
    "EXTERNAL_SERVICE_ERROR": {
        "description": "External service failed",
        "status_code": 502,
        "user_action": "Retry request or contact support"
    },
    "UPSTREAM_UNAVAILABLE": {
        "description": "A data provider (LLM, block explorer, DEX, yields) is unreachable",
        "status_code": 502,
        "user_action": "Retry in a few moments"
    },
    "UPSTREAM_DATA_INVALID": {
        "description": "A data provider returned malformed data",
        "status_code": 502,
        "user_action": "Retry; results may be empty until the provider recovers"
    }
}


def get_error_info(error_code: str) -> Dict[str, Any]:
    """
    Get detailed information about an error code.

    Args:
        error_code: Error code to look up

    Returns:
        Dictionary with error information
    """
    return ERROR_CODES.get(error_code, ERROR_CODES["INTERNAL_ERROR"])
