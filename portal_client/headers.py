"""Header composition and credential injection."""

import logging
from typing import Dict, Mapping, Optional

from .config import CredentialMode
from .credentials import TokenProvider

logger = logging.getLogger(__name__)


def _set_header(headers: Dict[str, str], name: str, value: str) -> None:
    """Set a header, replacing any existing spelling of the same name."""
    lookup = name.lower()
    for existing in [key for key in headers if key.lower() == lookup]:
        del headers[existing]
    headers[name] = value


def _remove_header(headers: Dict[str, str], name: str) -> None:
    lookup = name.lower()
    for existing in [key for key in headers if key.lower() == lookup]:
        del headers[existing]


def has_header(headers: Mapping[str, str], name: str) -> bool:
    lookup = name.lower()
    return any(key.lower() == lookup for key in headers)


def include_credentials(credential_mode: CredentialMode) -> bool:
    """Whether session cookies travel with the request."""
    return credential_mode == CredentialMode.COOKIE_SESSION


def compose_headers(
    default_headers: Mapping[str, str],
    headers: Optional[Mapping[str, Optional[str]]] = None,
    *,
    credential_mode: CredentialMode = CredentialMode.NONE,
    token_provider: Optional[TokenProvider] = None,
    binary_body: bool = False,
) -> Dict[str, str]:
    """
    Build the final header set for one request.

    Args:
        default_headers: Configured defaults, applied first
        headers: Per-call headers; they win over defaults case-insensitively
        credential_mode: Active credential strategy
        token_provider: Source of the bearer token in BEARER_TOKEN mode
        binary_body: Drop Content-Type so the transport can set the boundary

    Returns:
        Dict[str, str]: Merged headers
    """
    merged: Dict[str, str] = {}
    for name, value in default_headers.items():
        _set_header(merged, name, value)

    for name, value in (headers or {}).items():
        if value is None:
            continue
        _set_header(merged, name, str(value))

    if binary_body:
        _remove_header(merged, "Content-Type")

    if credential_mode == CredentialMode.BEARER_TOKEN:
        if not has_header(merged, "Authorization"):
            token = token_provider() if token_provider else None
            if token:
                merged["Authorization"] = f"Bearer {token}"
            else:
                logger.debug("No bearer token available, sending unauthenticated request")

    return merged
