"""Request body encoding."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

BINARY_TYPES = (bytes, bytearray, memoryview)


@dataclass
class FormData:
    """Multipart form body. Files map a field name to anything httpx accepts for ``files``.

    A form with only ``fields`` is still sent as ``multipart/form-data``.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)
    files: Mapping[str, Any] = field(default_factory=dict)


def is_binary_body(body: Any) -> bool:
    """True for bodies whose Content-Type must be chosen by the transport."""
    return isinstance(body, (FormData,) + BINARY_TYPES)


def _field_parts(fields: Mapping[str, Any]) -> List[Tuple[str, Tuple[None, bytes]]]:
    # Filename None renders a plain form field rather than a file part
    parts = []
    for name, value in fields.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            encoded = item if isinstance(item, bytes) else str(item).encode("utf-8")
            parts.append((name, (None, encoded)))
    return parts


def encode_body(body: Any) -> Dict[str, Any]:
    """Translate a request body into ``httpx`` request keyword arguments."""
    if body is None:
        return {}

    if isinstance(body, FormData):
        if body.files:
            return {"data": dict(body.fields), "files": dict(body.files)}
        # httpx falls back to urlencoded when ``files`` is empty
        return {"files": _field_parts(body.fields)}

    if isinstance(body, BINARY_TYPES):
        return {"content": bytes(body)}

    if isinstance(body, str):
        return {"content": body}

    return {"content": json.dumps(body)}
