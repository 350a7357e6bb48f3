"""
Shared error handling for the Word Inverser service.
"""

from typing import Dict, Any, Optional

from pydantic import BaseModel, Field

from shared.logging import get_correlation_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    correlation_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class InverserException(Exception):
    """Base exception for Word Inverser services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            correlation_id=get_correlation_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(InverserException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class CacheNotReadyError(InverserException):
    """Raised when a transformation is attempted before the word cache is loaded."""

    status_code = 503

    def __init__(
        self,
        message: str = (
            "The application is still initializing. Memory cache is not ready yet. "
            "Please try again in a few moments."
        ),
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("CACHE_NOT_READY", message, details)


class PreloadError(InverserException):
    """Word cache preload failed; the process must not accept traffic."""

    status_code = 503

    def __init__(self, message: str = "Word cache preload failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_PRELOAD_FAILED", message, details)


class PersistenceError(InverserException):
    """Durable store errors."""

    def __init__(self, operation: str, message: str = "Persistence error", details: Optional[Dict[str, Any]] = None):
        super().__init__("PERSISTENCE_ERROR", f"{operation}: {message}", details)
        self.operation = operation

