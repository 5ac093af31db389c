"""
Exception hierarchy for the accounts API client library.

Request construction, serialization and transport failures are raised by the
client itself. HTTP status errors are only raised on demand through
``Response.raise_for_status()``; a non-2xx status is otherwise a normal result.
"""

from typing import Any, Dict, Optional


class AccountAPIClientError(Exception):
    """
    Base exception for all accounts API client errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        error_code: Error code reported by the API (if any)
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.insert(0, f"[{self.error_code}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code}, "
            f"error_code={self.error_code!r})"
        )


# =============================================================================
# Request Construction Errors
# =============================================================================


class SerializationError(AccountAPIClientError):
    """The resource body could not be encoded to JSON."""

    def __init__(
        self,
        message: str = "Resource could not be serialized",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class MalformedRequestError(AccountAPIClientError):
    """
    The request descriptor cannot be turned into a wire request.

    Raised when:
    - The method is not one of the supported HTTP verbs
    - The URL cannot be parsed or is not an absolute http(s) URL
    """

    def __init__(
        self,
        message: str = "Malformed request",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# =============================================================================
# Transport Errors (Client-side)
# =============================================================================


class TransportError(AccountAPIClientError):
    """
    Network-level error occurred.

    Raised when there's a connection problem, the round trip was aborted,
    or the response body could not be read.
    """

    def __init__(
        self,
        message: str = "Transport error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class ConnectionError(TransportError):
    """Failed to establish connection to the server."""

    def __init__(
        self,
        message: str = "Failed to connect to server",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class DeadlineExceededError(TransportError):
    """The deadline or request timeout elapsed before the round trip completed."""

    def __init__(
        self,
        message: str = "deadline exceeded",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class RequestCancelledError(TransportError):
    """The cancellation token was cancelled before the round trip completed."""

    def __init__(
        self,
        message: str = "request cancelled",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# =============================================================================
# HTTP Status Errors
# =============================================================================


class HTTPStatusError(AccountAPIClientError):
    """Base class for errors derived from a non-2xx response."""

    default_message = "Unexpected response status"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message or self.default_message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class ValidationError(HTTPStatusError):
    """The API rejected the request as invalid (400)."""

    default_message = "Bad request"


class NotFoundError(HTTPStatusError):
    """The requested resource does not exist (404)."""

    default_message = "Resource not found"


class ConflictError(HTTPStatusError):
    """
    The request conflicts with the current state of the resource (409).

    Typically a duplicate id on create, or a stale version on delete.
    """

    default_message = "Resource conflict"


class ServerError(HTTPStatusError):
    """Server-side error occurred (5xx)."""

    default_message = "Server error"


# =============================================================================
# Exception Mapping
# =============================================================================

# Map HTTP status codes to exception classes
STATUS_CODE_EXCEPTIONS = {
    400: ValidationError,
    404: NotFoundError,
    409: ConflictError,
}


def exception_from_response(
    status_code: int,
    message: Optional[str] = None,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPStatusError:
    """
    Create an appropriate exception from an HTTP status.

    Args:
        status_code: HTTP status code
        message: Error message, defaults to the class message
        error_code: Error code reported by the API
        details: Additional error details

    Returns:
        Appropriate HTTPStatusError subclass
    """
    if 500 <= status_code < 600:
        exception_class = ServerError
    else:
        exception_class = STATUS_CODE_EXCEPTIONS.get(status_code, HTTPStatusError)
    return exception_class(
        message,
        status_code=status_code,
        error_code=error_code,
        details=details,
    )
