"""Fiscal-note (delivery receipt) validation models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetvision.models._base import FleetBaseModel, FleetEnum, resolve_label, to_data_uri, utcnow

# Labels some providers answer with when prompted in Portuguese.
_CLASSIFICATION_ALIASES: dict[str, str] = {
    "CANHOTO": "RECEIPT",
    "MERCADORIA": "GOODS",
    "OUTRO": "OTHER",
}


class DocumentClassification(FleetEnum):
    RECEIPT = "RECEIPT"
    """Delivery proof-of-receipt (canhoto)."""
    GOODS = "GOODS"
    """Photo of delivered goods, boxes or the truck."""
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value: object) -> DocumentClassification | None:
        return resolve_label(cls, value, aliases=_CLASSIFICATION_ALIASES, fallback=cls.OTHER)


class FiscalNoteStatus(FleetEnum):
    PROCESSING = "processing"
    VALIDATED = "validated"
    REVIEW = "review"
    REJECTED = "rejected"


class FiscalNoteFilter(FleetEnum):
    """Read-side buckets of the item list.

    ``REVIEW`` groups both ``review`` and ``rejected`` items.
    """

    ALL = "all"
    PROCESSING = "processing"
    VALIDATED = "validated"
    REVIEW = "review"


class DocumentAnalysis(FleetBaseModel):
    """Structured answer of the recognition provider for a delivery document."""

    RESPONSE_SCHEMA: ClassVar[dict[str, Any]] = {
        "type": "OBJECT",
        "properties": {
            "classification": {
                "type": "STRING",
                "enum": ["RECEIPT", "GOODS", "OTHER"],
                "description": "Image type",
            },
            "foundNumber": {
                "type": "STRING",
                "description": "Invoice number found in the image, if any",
                "nullable": True,
            },
            "numberMatches": {
                "type": "BOOLEAN",
                "description": "True if the number found matches the expected one",
            },
            "hasSignature": {
                "type": "BOOLEAN",
                "description": "True if a visible signature is present",
            },
            "confidence": {
                "type": "NUMBER",
                "description": "Confidence of the analysis (0 to 1)",
            },
        },
        "required": ["classification", "numberMatches", "hasSignature", "confidence"],
    }

    classification: DocumentClassification | None = None
    """``None`` when the provider omitted it; treated like ``OTHER``."""
    found_number: str | None = None
    number_matches: bool
    has_signature: bool
    confidence: float

    @field_validator("classification", mode="before")
    @classmethod
    def _resolve_classification(cls, value: Any) -> Any:
        if isinstance(value, str):
            return DocumentClassification(value)
        return value

    @field_validator("found_number", mode="before")
    @classmethod
    def _stringify_number(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


class UploadedImage(BaseModel):
    """A file selected for upload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_name: str
    data: bytes
    mime_type: str = "image/jpeg"

    @property
    def is_readable(self) -> bool:
        return bool(self.data)

    def data_uri(self) -> str:
        return to_data_uri(self.data, self.mime_type)


class FiscalNoteItem(BaseModel):
    """One uploaded document and its validation outcome.

    Items are immutable; the store replaces them by id as their analysis
    resolves.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    file_name: str
    image_ref: str
    expected_invoice_number: str
    status: FiscalNoteStatus = FiscalNoteStatus.PROCESSING
    ai_data: DocumentAnalysis | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_settled(self) -> bool:
        return self.status != FiscalNoteStatus.PROCESSING
