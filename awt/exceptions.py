"""Custom exceptions for Amazonas Web Tools."""

from typing import Any


class AWTError(Exception):
    """Base exception for all AWT errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize AWT error.

        Args:
            message: Error message
            details: Additional error details

        """
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(AWTError):
    """Raised when configuration is invalid or missing."""


class ValidationError(AWTError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class InvalidQueryError(ValidationError):
    """Raised when a search query is empty or malformed."""

    def __init__(self, query: Any, message: str = "Search query must not be empty") -> None:
        super().__init__("query", query, message)
        self.query = query


class APIError(AWTError):
    """Base class for API-related errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            status_code: HTTP status code (0 when no response was received)
            message: Error message
            response_text: Raw response text from API
            details: Additional error details

        """
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class AuthenticationError(APIError):
    """Raised when authentication fails (401)."""

    def __init__(self, message: str = "Authentication failed", response_text: str | None = None) -> None:
        super().__init__(401, message, response_text)


class PermissionError(APIError):
    """Raised when access is forbidden (403)."""

    def __init__(self, message: str = "Access forbidden", response_text: str | None = None) -> None:
        super().__init__(403, message, response_text)


class NotFoundError(APIError):
    """Raised when resource is not found (404)."""

    def __init__(self, message: str = "Resource not found", response_text: str | None = None) -> None:
        super().__init__(404, message, response_text)


class ConflictError(APIError):
    """Raised when a write collides with an existing record (409)."""

    def __init__(self, message: str = "Record already exists", response_text: str | None = None) -> None:
        super().__init__(409, message, response_text)


class RateLimitError(APIError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_text: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(429, message, response_text)
        self.retry_after = retry_after


class UnavailableError(APIError):
    """Raised when the backend cannot be reached or fails (5xx)."""

    def __init__(
        self,
        message: str = "Backend unavailable",
        status_code: int = 503,
        response_text: str | None = None,
    ) -> None:
        super().__init__(status_code, message, response_text)


class TimeoutError(AWTError):
    """Raised when operation times out."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        message = f"Operation '{operation}' timed out after {timeout_seconds} seconds"
        super().__init__(message, {"operation": operation, "timeout_seconds": timeout_seconds})
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class CacheError(AWTError):
    """Raised when a result cache operation cannot be applied."""


class DuplicateRecordError(CacheError, ConflictError):
    """Raised when a created record collides with a cached id."""

    def __init__(self, record_id: str) -> None:
        ConflictError.__init__(self, f"Record '{record_id}' already exists in the result set")
        self.record_id = record_id


class RecordNotFoundError(CacheError, NotFoundError):
    """Raised when an update or delete targets an id missing from the cache.

    The cache and the backend have diverged; reload the query instead of
    patching.
    """

    def __init__(self, record_id: str) -> None:
        NotFoundError.__init__(self, f"Record '{record_id}' not found in the result set")
        self.record_id = record_id
