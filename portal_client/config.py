"""API client configuration."""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .credentials import TokenProvider
from .exceptions import ConfigurationError

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_MS = 1000


class CredentialMode(str, Enum):
    """How the client proves identity to the server."""

    NONE = "none"
    BEARER_TOKEN = "bearer_token"
    COOKIE_SESSION = "cookie_session"


def _default_headers() -> Mapping[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


@dataclass(frozen=True)
class ClientConfig:
    """Process-wide client configuration. Derive a new config instead of mutating."""

    base_url: str = ""
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)

    # Deadline per attempt, 0 disables the timer
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Retry settings
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS

    # Credentials
    credential_mode: CredentialMode = CredentialMode.BEARER_TOKEN
    token_provider: Optional[TokenProvider] = None

    def __post_init__(self):
        """Validate values and freeze the header mapping."""
        if self.timeout_ms < 0:
            raise ConfigurationError(f"timeout_ms must be >= 0, got {self.timeout_ms}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay_ms < 0:
            raise ConfigurationError(f"retry_delay_ms must be >= 0, got {self.retry_delay_ms}")

        object.__setattr__(self, "credential_mode", CredentialMode(self.credential_mode))
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers or {}))
        )

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Attempt deadline in seconds, None when disabled."""
        if not self.timeout_ms:
            return None
        return self.timeout_ms / 1000.0

    def with_base_url(self, base_url: str) -> "ClientConfig":
        """Create a new config with different base URL."""
        return replace(self, base_url=base_url)

    def with_headers(self, headers: Mapping[str, str]) -> "ClientConfig":
        """Create a new config with additional default headers."""
        new_headers = dict(self.default_headers)
        new_headers.update(headers)
        return replace(self, default_headers=new_headers)

    def with_retries(self, max_retries: int, retry_delay_ms: Optional[int] = None) -> "ClientConfig":
        """Create a new config with a different retry policy."""
        if retry_delay_ms is None:
            retry_delay_ms = self.retry_delay_ms
        return replace(self, max_retries=max_retries, retry_delay_ms=retry_delay_ms)

    def with_credentials(
        self,
        credential_mode: CredentialMode,
        token_provider: Optional[TokenProvider] = None,
    ) -> "ClientConfig":
        """Create a new config with a different credential strategy."""
        if token_provider is None:
            token_provider = self.token_provider
        return replace(self, credential_mode=credential_mode, token_provider=token_provider)
