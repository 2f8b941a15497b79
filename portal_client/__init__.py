"""Resilient async API client for the business portal."""

from .client import PortalClient, RequestSpec
from .config import ClientConfig, CredentialMode
from .credentials import TokenProvider, TokenStore, static_token
from .deadline import AbortSignal, run_with_deadline
from .headers import compose_headers, include_credentials
from .logging_config import ClientMetrics, JsonFormatter, get_metrics_collector, setup_logging
from .payload import FormData, encode_body, is_binary_body
from .response import ApiResponse, normalize_response
from .retry import NO_RETRY, AttemptState, RetryCoordinator, RetryPolicy
from .settings import ClientSettings, get_settings
from .urls import build_url
from .exceptions import (
    PortalClientError,
    ConfigurationError,
    RequestAbortedError,
    ApiError,
    NetworkError,
    RequestTimeoutError,
    classify_transport_error,
    error_to_dict,
)

__all__ = [
    # Client
    "PortalClient",
    "RequestSpec",

    # Configuration
    "ClientConfig",
    "CredentialMode",
    "ClientSettings",
    "get_settings",

    # Credentials
    "TokenProvider",
    "TokenStore",
    "static_token",

    # Request pipeline
    "build_url",
    "compose_headers",
    "include_credentials",
    "FormData",
    "encode_body",
    "is_binary_body",
    "AbortSignal",
    "run_with_deadline",
    "RetryPolicy",
    "RetryCoordinator",
    "AttemptState",
    "NO_RETRY",
    "ApiResponse",
    "normalize_response",

    # Logging and metrics
    "setup_logging",
    "JsonFormatter",
    "ClientMetrics",
    "get_metrics_collector",

    # Exceptions
    "PortalClientError",
    "ConfigurationError",
    "RequestAbortedError",
    "ApiError",
    "NetworkError",
    "RequestTimeoutError",
    "classify_transport_error",
    "error_to_dict",
]
