"""Base model and enum for fleetvision data.

Every wire-facing model inherits from :class:`FleetBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase provider keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops blank sentinel
  strings (``""``, ``"--"``, ``"null"``) so the field default is used.

Label enums inherit from :class:`FleetEnum` which resolves values
case-insensitively instead of raising on ``"receipt"`` vs ``"RECEIPT"``.
"""

from __future__ import annotations

import base64
import enum
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

_SENTINELS = frozenset({"", "--", "null", "none"})

TEnum = TypeVar("TEnum", bound="FleetEnum")


def utcnow() -> datetime:
    return datetime.now(UTC)


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode *data* as a ``data:`` URI usable as a local preview reference."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def resolve_label(
    enum_cls: type[TEnum],
    value: object,
    *,
    aliases: Mapping[str, str] | None = None,
    fallback: TEnum | None = None,
) -> TEnum | None:
    """Resolve *value* to a member of *enum_cls*.

    Matching is case-insensitive; *aliases* maps alternate upper-case
    labels to canonical values.  Unmatched strings resolve to *fallback*.
    """
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    for member in enum_cls:
        if member.value.lower() == normalized.lower():
            return member
    if aliases:
        canonical = aliases.get(normalized.upper())
        if canonical is not None:
            return enum_cls(canonical)
    return fallback


class FleetEnum(enum.StrEnum):
    """Base for string label enums (case-insensitive lookup)."""

    @classmethod
    def _missing_(cls, value: object) -> FleetEnum | None:
        return resolve_label(cls, value)


class FleetBaseModel(BaseModel):
    """Base for provider response models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * blank sentinel strings → dropped so the field default is used
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_sentinels(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, str) and value.strip().lower() in _SENTINELS:
                continue
            cleaned[key] = value
        return cleaned
