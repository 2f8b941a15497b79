"""Response normalization into the uniform API envelope."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

import httpx

from .exceptions import ApiError, FieldErrors, coerce_field_errors

T = TypeVar("T")

DEFAULT_SUCCESS_MESSAGE = "Operation completed successfully"
TEXT_SUCCESS_MESSAGE = "Operation completed"
UNKNOWN_ERROR_MESSAGE = "Unknown error"

_ENVELOPE_KEYS = ("success", "message", "data", "errors")


@dataclass
class ApiResponse(Generic[T]):
    """The only shape a successful call resolves to."""

    success: bool
    message: str
    data: Optional[T] = None
    errors: Optional[FieldErrors] = None
    # Remaining top-level keys of a server-built envelope
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.errors is not None:
            result["errors"] = self.errors
        result.update(self.extra)
        return result

    @classmethod
    def from_envelope(cls, payload: Mapping[str, Any]) -> "ApiResponse[Any]":
        """Adopt a body that already carries ``success`` and ``message``."""
        return cls(
            success=_envelope_flag(payload["success"]),
            message="" if payload["message"] is None else str(payload["message"]),
            data=payload.get("data"),
            errors=coerce_field_errors(payload.get("errors")),
            extra={k: v for k, v in payload.items() if k not in _ENVELOPE_KEYS},
        )


def _envelope_flag(value: Any) -> Any:
    """Keep booleans as sent; only the literal strings "true" and "false" are translated."""
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return value


_MISSING = object()


def _parse_json(response: httpx.Response) -> Any:
    """Return the decoded body, or _MISSING when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return _MISSING


def _error_message(parsed: Any, response: httpx.Response) -> str:
    if isinstance(parsed, Mapping):
        message = parsed.get("message")
        if message:
            return str(message)

        nested = parsed.get("error")
        if isinstance(nested, Mapping) and nested.get("message"):
            return str(nested["message"])
        if isinstance(nested, str) and nested:
            return nested

    return response.reason_phrase or UNKNOWN_ERROR_MESSAGE


def normalize_response(response: httpx.Response) -> ApiResponse[Any]:
    """
    Convert a raw response into an ApiResponse, or raise ApiError.

    Args:
        response: Response whose body has already been read

    Returns:
        ApiResponse: The uniform envelope for 2xx responses

    Raises:
        ApiError: For every non-2xx response
    """
    status = response.status_code

    if status == 204:
        return ApiResponse(success=True, message=DEFAULT_SUCCESS_MESSAGE)

    parsed = _parse_json(response)

    if parsed is _MISSING:
        text = response.text
        if not response.is_success:
            raise ApiError(status, text or response.reason_phrase or UNKNOWN_ERROR_MESSAGE)
        return ApiResponse(success=True, message=text or TEXT_SUCCESS_MESSAGE)

    if not response.is_success:
        errors = parsed.get("errors") if isinstance(parsed, Mapping) else None
        raise ApiError(status, _error_message(parsed, response), errors=errors)

    if isinstance(parsed, Mapping):
        if "success" in parsed and "message" in parsed:
            return ApiResponse.from_envelope(parsed)
        return ApiResponse(success=True, message=DEFAULT_SUCCESS_MESSAGE, data=parsed)

    # Primitive JSON values (numbers, strings, lists, null)
    return ApiResponse(success=True, message=DEFAULT_SUCCESS_MESSAGE, data=parsed)
