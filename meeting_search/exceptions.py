"""Application exception hierarchy.

All custom exceptions inherit from MeetingSearchError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "MS-1000"
    CONFIGURATION_ERROR = "MS-1001"
    VALIDATION_ERROR = "MS-1002"
    INVALID_QUERY = "MS-1003"

    # Document errors (2xxx)
    DOCUMENT_NOT_FOUND = "MS-2000"
    DOCUMENT_PARSE_ERROR = "MS-2001"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "MS-3000"
    EMBEDDING_MODEL_UNAVAILABLE = "MS-3001"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "MS-4000"
    COLLECTION_NOT_FOUND = "MS-4001"
    COLLECTION_EXISTS = "MS-4002"
    VECTOR_STORE_TIMEOUT = "MS-4003"

    # Retrieval errors (6xxx)
    RETRIEVAL_ERROR = "MS-6000"


class MeetingSearchError(Exception):
    """Base exception for all meeting search errors.

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


class ConfigurationError(MeetingSearchError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(MeetingSearchError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ) -> None:
        super().__init__(message, code, details)


class InvalidQueryError(ValidationError):
    """Search query is empty or whitespace only."""

    def __init__(
        self,
        message: str = "Search query must not be empty",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details, code=ErrorCode.INVALID_QUERY)


class DocumentError(MeetingSearchError):
    """Record loading or lookup error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DOCUMENT_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(MeetingSearchError):
    """Embedding model error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(MeetingSearchError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class RetrievalError(MeetingSearchError):
    """Retrieval operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RETRIEVAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
