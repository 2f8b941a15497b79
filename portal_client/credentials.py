"""Credential providers used for bearer token authentication."""

import threading
from typing import Callable, Optional

TokenProvider = Callable[[], Optional[str]]


class TokenStore:
    """
    In-memory bearer token store.

    The client only reads from the store; login and logout flows write to it.
    Calling the store returns the current token, so an instance can be passed
    anywhere a TokenProvider is expected.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token or None
        self._lock = threading.Lock()

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        with self._lock:
            self._token = token or None

    def clear_token(self) -> None:
        with self._lock:
            self._token = None

    def __call__(self) -> Optional[str]:
        return self.get_token()

    def __repr__(self) -> str:
        state = "set" if self._token else "empty"
        return f"TokenStore({state})"


def static_token(token: Optional[str]) -> TokenProvider:
    """Create a provider that always returns the same token."""
    value = token or None

    def provider() -> Optional[str]:
        return value

    return provider
