"""
Error types and standardized error responses for the knowledge service.

Domain code raises the typed exceptions below; the HTTP layer turns them
into a consistent JSON envelope with correlation ID tracking.

Usage:
    from recall.shared.errors import NotFoundError, error_response_for

    try:
        item = await knowledge.get_item(item_id)
    except KnowledgeError as exc:
        return error_response_for(exc, correlation_id=get_correlation_id())
"""

from enum import Enum
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standard error codes used across the knowledge service."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class KnowledgeError(Exception):
    """Base class for all knowledge-base errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(KnowledgeError):
    """A referenced item, source document, page or project does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(KnowledgeError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class InvalidItemTypeError(ValidationError):
    """Knowledge item type outside the closed set."""

    def __init__(self, item_type: str):
        super().__init__(
            f"Invalid knowledge item type: {item_type}",
            details={"type": item_type},
        )
        self.item_type = item_type


class UpstreamServiceError(KnowledgeError):
    """The completion or embedding service failed or returned nothing usable."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    status_code = 502
    service_name = "upstream"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        details = {"service": self.service_name, **(details or {})}
        super().__init__(message, details=details)


class EmbeddingServiceError(UpstreamServiceError):
    service_name = "embedding"


class CompletionServiceError(UpstreamServiceError):
    service_name = "completion"


class StoreError(KnowledgeError):
    """Unexpected failure talking to the relational store."""

    code = ErrorCode.DATABASE_ERROR
    status_code = 500


# =============================================================================
# RESPONSES
# =============================================================================

class ErrorDetail(BaseModel):
    """Structured error detail model."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""
    error: ErrorDetail


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with standardized error format
    """
    error_detail = ErrorDetail(
        code=code.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": error_detail.model_dump(exclude_none=True)},
    )


def error_response_for(
    exc: KnowledgeError,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """Render a KnowledgeError with its own code and status."""
    return error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        correlation_id=correlation_id,
    )


def internal_error(
    message: str = "Internal server error",
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a 500 internal error response.

    Note: Be careful not to expose sensitive internal details to clients.
    """
    return error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message=message,
        status_code=500,
        correlation_id=correlation_id,
    )
