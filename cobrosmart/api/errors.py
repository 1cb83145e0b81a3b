"""
Structured error handling for the CobroSmart AI Engine.

Provides custom exceptions and standardized error response models
for consistent API error responses.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_JSON = "INVALID_JSON"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_STATUS = "INVALID_STATUS"
    MISSING_PROMISE_DATE = "MISSING_PROMISE_DATE"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    DEBTOR_NOT_FOUND = "DEBTOR_NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"

    # Configuration errors (5xx)
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Data store errors (5xx)
    DEBTOR_QUERY_FAILED = "DEBTOR_QUERY_FAILED"
    DEBTOR_UPDATE_FAILED = "DEBTOR_UPDATE_FAILED"
    EVENTS_QUERY_FAILED = "EVENTS_QUERY_FAILED"
    EVENT_INSERT_FAILED = "EVENT_INSERT_FAILED"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    SETTINGS_READ_FAILED = "SETTINGS_READ_FAILED"
    SETTINGS_WRITE_FAILED = "SETTINGS_WRITE_FAILED"
    IMPORT_READ_FAILED = "IMPORT_READ_FAILED"
    BOOTSTRAP_QUERY_FAILED = "BOOTSTRAP_QUERY_FAILED"
    BOOTSTRAP_CREATE_FAILED = "BOOTSTRAP_CREATE_FAILED"
    DB_CHECK_FAILED = "DB_CHECK_FAILED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """
    Standardized error response format.

    All API errors return this structure for consistent client handling.
    """

    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error details (field errors, etc.)",
    )
    request_id: Optional[str] = Field(
        None,
        description="Request ID for tracing",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the error occurred",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "Debtor not found.",
                "error_code": "DEBTOR_NOT_FOUND",
                "details": {"debtor_id": "0b8f7c1e-6a55-4c1e-9a53-1f0b1c2d3e4f"},
                "request_id": "550e8400-e29b-41d4-a716-446655440000",
                "timestamp": "2024-01-15T10:30:00Z",
            }
        }
    }


# Custom Exceptions


class CobroBaseError(Exception):
    """Base exception for all CobroSmart errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(CobroBaseError):
    """Raised when request validation fails."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            status_code=400,
        )


class InvalidStatusError(ValidationError):
    """Raised when a status update names an unknown event type."""

    def __init__(self, status: Optional[str], valid_values: List[str]):
        super().__init__(
            message=f"Status must be one of {'/'.join(valid_values)}.",
            details={"status": status, "valid_values": valid_values},
            error_code=ErrorCode.INVALID_STATUS,
        )


class DebtorNotFoundError(CobroBaseError):
    """Raised when a debtor is absent or owned by another business."""

    def __init__(self, debtor_id: str):
        super().__init__(
            message="Debtor not found.",
            error_code=ErrorCode.DEBTOR_NOT_FOUND,
            details={"debtor_id": debtor_id},
            status_code=404,
        )


class ConfigurationError(CobroBaseError):
    """Raised when required server configuration is missing."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            message="Server environment is not configured correctly.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            details={"missing": missing},
            status_code=500,
        )


class DataStoreError(CobroBaseError):
    """Raised when a data store operation fails. Always fatal for the request."""

    def __init__(self, message: str, error_code: ErrorCode):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
        )
