"""
Exceptions raised by the portal API client.
Every failure a caller sees is a PortalClientError; HTTP failures are ApiError.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, List[str]]

NETWORK_ERROR_STATUS = 0
TIMEOUT_STATUS = 408
RETRYABLE_STATUSES = frozenset({NETWORK_ERROR_STATUS, TIMEOUT_STATUS})


class PortalClientError(Exception):
    """Base exception for all portal client errors."""

    def __init__(self, message: str = "An unexpected error occurred in the API client", details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigurationError(PortalClientError):
    """Raised when client configuration values are invalid."""
    pass


class RequestAbortedError(PortalClientError):
    """Default reason of an externally aborted request."""

    def __init__(self, message: str = "Request aborted", details=None):
        super().__init__(message, details)


class ApiError(PortalClientError):
    """
    The single failure shape raised to callers.

    Args:
        status: HTTP status, 0 for a network failure, 408 for a client timeout
        message: Human readable message
        errors: Optional per-field validation messages
        original_exception: Transport exception this error wraps, if any
        **context: Additional error context (url, method, ...)
    """

    def __init__(
        self,
        status: int,
        message: str,
        errors: Optional[Mapping[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
        **context
    ):
        self.status = status
        self.errors: Optional[FieldErrors] = coerce_field_errors(errors)
        self.original_exception = original_exception
        self.context = context

        log_message = f"{self.__class__.__name__}: {status} {message}"
        if context:
            log_message += f" | Context: {context}"
        logger.debug(log_message)

        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Network failures and timeouts may succeed on another attempt."""
        return self.status in RETRYABLE_STATUSES

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "status": self.status,
            "message": self.message,
        }
        if self.errors is not None:
            data["errors"] = self.errors
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status!r}, message={self.message!r})"


class NetworkError(ApiError):
    """Raised when the server could not be reached at all."""

    def __init__(self, message: str = "Network error", **kwargs):
        super().__init__(NETWORK_ERROR_STATUS, message, **kwargs)


class RequestTimeoutError(ApiError):
    """Raised when an attempt exceeds its deadline."""

    def __init__(self, message: str = "Request timeout", **kwargs):
        super().__init__(TIMEOUT_STATUS, message, **kwargs)


def coerce_field_errors(errors: Optional[Mapping[str, Any]]) -> Optional[FieldErrors]:
    """Normalize a server ``errors`` mapping to field -> list of strings."""
    if not isinstance(errors, Mapping):
        return None

    coerced: FieldErrors = {}
    for field_name, messages in errors.items():
        if messages is None:
            continue
        if isinstance(messages, (list, tuple)):
            coerced[str(field_name)] = [str(m) for m in messages]
        else:
            coerced[str(field_name)] = [str(messages)]
    return coerced


def classify_transport_error(exception: Exception, **context) -> ApiError:
    """
    Map an httpx exception raised during an attempt to an ApiError.

    Args:
        exception: Exception raised by the transport
        **context: Request context attached to the error

    Returns:
        ApiError: RequestTimeoutError, NetworkError or a generic status 500 error
    """
    if isinstance(exception, httpx.TimeoutException):
        return RequestTimeoutError(original_exception=exception, **context)

    if isinstance(exception, httpx.TransportError):
        return NetworkError(original_exception=exception, **context)

    return ApiError(
        500,
        str(exception) or "Unknown error",
        original_exception=exception,
        **context
    )


def error_to_dict(exception: BaseException, default_message: str = "An unexpected error occurred") -> Dict[str, Any]:
    """
    Render any exception to the standard error dict consumed by UI code.

    Args:
        exception: The caught exception
        default_message: Message used when the exception carries none

    Returns:
        dict: Standardized error response
    """
    if isinstance(exception, ApiError):
        data = exception.to_dict()
        data["error"] = True
        return data

    return {
        "error": True,
        "error_type": type(exception).__name__,
        "message": str(exception) or default_message,
    }
