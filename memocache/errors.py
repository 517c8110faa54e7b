"""
memocache - Error Types

Defines the exception hierarchy for the caching layer.
All exceptions inherit from MemocacheError for consistent error handling.

Propagation rules:
- Backend failures surface as BackendUnavailableError, never as a cache miss
- Key rendering failures are raised before any backend is touched
- Flags and TTL combinations are never errors
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes attached to every memocache exception."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CACHE_FAILURE = "CACHE_FAILURE"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    KEY_RENDERING_FAILURE = "KEY_RENDERING_FAILURE"
    SANITIZATION_VIOLATION = "SANITIZATION_VIOLATION"
    STATIC_TYPE_OMISSION = "STATIC_TYPE_OMISSION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MemocacheError(Exception):
    """Base exception for all memocache errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured logs and responses."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(MemocacheError):
    """Raised when configuration is invalid or a backend cannot be built."""

    code = ErrorCode.CONFIGURATION_ERROR


class CacheError(MemocacheError):
    """Base exception for cache operation errors."""

    code = ErrorCode.CACHE_FAILURE


class BackendUnavailableError(CacheError):
    """
    Raised when a backend operation fails.

    Covers timeouts, connection loss and (de)serialization failures on the
    backend side. Adapters may mark an error as retryable; the core never
    retries on its own.
    """

    code = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(
        self,
        backend: str,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ):
        message = f"Cache backend '{backend}' failed during {operation}: {reason}"
        error_details = details or {}
        error_details.update({"backend": backend, "operation": operation})
        super().__init__(message, error_details)
        self.backend = backend
        self.operation = operation
        self.retryable = retryable


class KeyRenderingError(CacheError):
    """Raised when a key part or argument has no deterministic string rendering."""

    code = ErrorCode.KEY_RENDERING_FAILURE

    def __init__(self, value: Any, reason: str, details: dict[str, Any] | None = None):
        type_name = type(value).__qualname__
        message = f"Cannot render value of type {type_name} as a cache key part: {reason}"
        error_details = details or {}
        error_details["value_type"] = type_name
        super().__init__(message, error_details)
        self.value_type = type_name


class SanitizationViolationError(CacheError):
    """Raised when a sanitizer produces a key that still breaks backend constraints."""

    code = ErrorCode.SANITIZATION_VIOLATION


class StaticTypeOmissionError(MemocacheError):
    """
    Raised when a memoized callable does not declare its result type.

    The declared return annotation is what cached values are validated
    against, so it must be present (and resolvable) for memoization.
    """

    code = ErrorCode.STATIC_TYPE_OMISSION

    def __init__(self, qualified_name: str, reason: str = "missing return annotation"):
        message = (
            f"Memoized callable '{qualified_name}' must declare its result type "
            f"({reason}); add a return annotation such as '-> int'"
        )
        super().__init__(message, {"callable": qualified_name, "reason": reason})
        self.qualified_name = qualified_name


def is_retryable_error(error: Exception) -> bool:
    """
    Check if an error is transient and the operation may be retried.

    Args:
        error: Exception to check

    Returns:
        True if error is a retryable backend failure
    """
    if isinstance(error, BackendUnavailableError):
        return error.retryable

    # Raw network errors from client libraries that escaped an adapter
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True

    return False


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the ErrorCode for an exception.

    Args:
        error: Exception to categorize

    Returns:
        ErrorCode of a memocache exception, INTERNAL_ERROR otherwise
    """
    if isinstance(error, MemocacheError):
        return error.code
    return ErrorCode.INTERNAL_ERROR
