"""Async REST client for the portal API with deadlines, retries and a uniform envelope."""

import logging
from dataclasses import dataclass
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import ClientConfig, CredentialMode
from .deadline import AbortSignal, run_with_deadline
from .exceptions import ApiError, RequestTimeoutError, classify_transport_error
from .headers import compose_headers, include_credentials
from .logging_config import ClientMetrics, get_metrics_collector
from .payload import encode_body, is_binary_body
from .response import ApiResponse, normalize_response
from .retry import RetryCoordinator, RetryPolicy
from .urls import build_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestSpec:
    """One logical request, built fresh by each verb method."""

    method: str
    path: str
    body: Any = None
    headers: Optional[Mapping[str, Optional[str]]] = None
    params: Optional[Mapping[str, Any]] = None
    credentials_required: bool = True


class PortalClient:
    """REST API client returning ApiResponse envelopes and raising ApiError."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[ClientMetrics] = None,
    ):
        """Initialize API client with configuration.

        Args:
            config: Client configuration. If None, uses default config.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
            metrics: Metrics collector. If None, uses the process-wide collector.
        """
        self.config = config or ClientConfig()
        self.metrics = metrics or get_metrics_collector()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_async_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None:
            # Deadlines are enforced per attempt by run_with_deadline
            self._client = httpx.AsyncClient(
                transport=self._transport,
                cookies=self._cookie_jar(),
                timeout=None,
                follow_redirects=True,
            )
        return self._client

    def _cookie_jar(self) -> Optional[CookieJar]:
        """Outside COOKIE_SESSION mode the jar refuses to store or send any cookie."""
        if include_credentials(self.config.credential_mode):
            return None
        return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))

    @property
    def cookies(self) -> httpx.Cookies:
        """Session cookie jar used in COOKIE_SESSION mode."""
        return self._get_async_client().cookies

    def _build_request(self, spec: RequestSpec) -> httpx.Request:
        url = build_url(self.config.base_url, spec.path)
        headers = compose_headers(
            self.config.default_headers,
            spec.headers,
            credential_mode=self.config.credential_mode if spec.credentials_required else CredentialMode.NONE,
            token_provider=self.config.token_provider,
            binary_body=is_binary_body(spec.body),
        )

        request = self._get_async_client().build_request(
            spec.method,
            url,
            headers=headers,
            params=spec.params,
            **encode_body(spec.body),
        )
        return request

    async def _send_once(self, request: httpx.Request) -> ApiResponse[Any]:
        """One network round-trip plus normalization."""
        self.metrics.record_attempt()
        logger.debug(f"{request.method} {request.url}")

        try:
            response = await self._get_async_client().send(request)
        except httpx.HTTPError as e:
            raise classify_transport_error(
                e,
                request_url=str(request.url),
                request_method=request.method,
            ) from e

        return normalize_response(response)

    def _on_retry(self, attempt: int, error: ApiError, delay: float) -> None:
        self.metrics.record_retry()

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Optional[str]]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send a request and return its normalized envelope.

        Raises:
            ApiError: On any HTTP, network or timeout failure
        """
        spec = RequestSpec(
            method=method.upper(),
            path=path,
            body=body,
            headers=headers,
            params=params,
            credentials_required=self.config.credential_mode != CredentialMode.NONE,
        )

        async def attempt() -> ApiResponse[Any]:
            # Rebuilt per attempt so the token is read fresh and bodies are rewound
            request = self._build_request(spec)
            return await run_with_deadline(
                lambda: self._send_once(request),
                self.config.timeout_ms,
                signal,
            )

        coordinator = RetryCoordinator(
            RetryPolicy.from_config(self.config),
            on_retry=self._on_retry,
        )

        try:
            result = await coordinator.run(attempt)
        except ApiError as e:
            self.metrics.record_call(success=False, timed_out=isinstance(e, RequestTimeoutError))
            raise
        except BaseException:
            self.metrics.record_call(success=False)
            raise

        self.metrics.record_call(success=True)
        return result

    async def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send GET request."""
        return await self.request("GET", path, params=params, headers=headers, signal=signal)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send POST request."""
        return await self.request("POST", path, body, params=params, headers=headers, signal=signal)

    async def put(
        self,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send PUT request."""
        return await self.request("PUT", path, body, params=params, headers=headers, signal=signal)

    async def patch(
        self,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send PATCH request."""
        return await self.request("PATCH", path, body, params=params, headers=headers, signal=signal)

    async def delete(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        signal: Optional[AbortSignal] = None,
    ) -> ApiResponse[Any]:
        """Send DELETE request."""
        return await self.request("DELETE", path, params=params, headers=headers, signal=signal)

    async def aclose(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
