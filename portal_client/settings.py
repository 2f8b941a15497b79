"""Environment-driven configuration for the portal client."""

from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    CredentialMode,
)
from .credentials import TokenProvider, static_token


class ClientSettings(BaseSettings):
    """Client configuration loaded from ``PORTAL_API_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = ""
    environment: Literal["development", "production"] = "production"

    # Timeouts and retries
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0)
    retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0)
    max_retries: Optional[int] = Field(default=None, ge=0)

    # Credentials
    credential_mode: CredentialMode = CredentialMode.BEARER_TOKEN
    token: SecretStr | None = None

    @property
    def resolved_max_retries(self) -> int:
        """Explicit value if set, otherwise no retries in development."""
        if self.max_retries is not None:
            return self.max_retries
        return 0 if self.environment == "development" else DEFAULT_MAX_RETRIES

    def to_client_config(self, token_provider: Optional[TokenProvider] = None) -> ClientConfig:
        """Build a ClientConfig from these settings."""
        if token_provider is None and self.token is not None:
            token_provider = static_token(self.token.get_secret_value())

        return ClientConfig(
            base_url=self.base_url,
            timeout_ms=self.timeout_ms,
            max_retries=self.resolved_max_retries,
            retry_delay_ms=self.retry_delay_ms,
            credential_mode=self.credential_mode,
            token_provider=token_provider,
        )


_settings: Optional[ClientSettings] = None


def get_settings() -> ClientSettings:
    """Get the process-wide settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = ClientSettings()
    return _settings
