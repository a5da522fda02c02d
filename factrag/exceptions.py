"""Application exception hierarchy.

All custom exceptions inherit from FactRAGError and carry an error code.
Looking up an id that does not exist is not an error: stores return an
empty result instead.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "FRG-1000"
    CONFIGURATION_ERROR = "FRG-1001"
    VALIDATION_ERROR = "FRG-1002"
    INVALID_INPUT = "FRG-1003"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "FRG-3000"
    EMBEDDING_DIMENSION_MISMATCH = "FRG-3001"
    EMBEDDING_AUTH_ERROR = "FRG-3002"
    EMBEDDING_RATE_LIMIT = "FRG-3003"
    EMBEDDING_INPUT_TOO_LONG = "FRG-3004"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "FRG-4000"
    COLLECTION_NOT_FOUND = "FRG-4001"
    COLLECTION_EXISTS = "FRG-4002"
    DIMENSION_MISMATCH = "FRG-4003"
    WRITE_NOT_ACKNOWLEDGED = "FRG-4004"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "FRG-5000"
    LLM_TIMEOUT = "FRG-5001"
    LLM_RATE_LIMIT = "FRG-5002"
    LLM_CONTEXT_LENGTH = "FRG-5003"
    LLM_AUTH_ERROR = "FRG-5004"


class FactRAGError(Exception):
    """Base exception for all factrag errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(FactRAGError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(FactRAGError):
    """Request validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class InvalidInputError(FactRAGError):
    """Malformed or oversized input to an embedding or completion call."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ServiceError(FactRAGError):
    """Embedding or completion backend failure (network, auth, rate limit)."""


class EmbeddingError(ServiceError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(ServiceError):
    """Completion service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class StoreError(FactRAGError):
    """Vector database error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
