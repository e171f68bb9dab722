"""Helpers for safe debug logging.

Recognition requests carry the provider API key and whole photos encoded
as base64. Everything passed to a DEBUG trace goes through
:func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MAX_DEPTH = 20

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "apikey",
        "api_key",
        "x-goog-api-key",
        "key",
        "token",
        "authorization",
        "cookie",
    }
)

# Keys holding encoded image content; replaced by their size.
_IMAGE_KEYS: frozenset[str] = frozenset({"data", "imagedata", "image_data", "imageref", "image_ref"})


def _is_data_uri(text: str) -> bool:
    return text.startswith("data:") and ";base64," in text


def _redact_text(text: str, max_string: int) -> str:
    if _is_data_uri(text):
        return f"<data-uri:{len(text)}c>"
    if len(text) <= max_string:
        return text
    return f"{text[:max_string]}…<truncated>"


def _redact_entry(key: str, item: Any, max_string: int, depth: int) -> Any:
    lowered = key.lower()
    if lowered in _SECRET_KEYS:
        return "<redacted>"
    if lowered in _IMAGE_KEYS and isinstance(item, (str, bytes, bytearray)):
        return f"<blob:{len(item)}>"
    return redact_for_log(item, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and image payloads elided."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _redact_text(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {str(k): _redact_entry(str(k), v, max_string, _depth) for k, v in value.items()}
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    # Unknown objects are logged by repr only.
    return repr(value)
