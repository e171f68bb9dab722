"""Odometer reading and verification record models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetvision.models._base import FleetBaseModel, FleetEnum, utcnow


class ReadingState(FleetEnum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    DIVERGENCE = "divergence"
    MATCH = "match"
    SAVED = "saved"
    ERROR = "error"


class VerificationOutcome(FleetEnum):
    """Only successful reconciliations are ever persisted."""

    SUCCESS = "success"


class OdometerAnalysis(FleetBaseModel):
    """Structured answer of the recognition provider for a dashboard photo."""

    RESPONSE_SCHEMA: ClassVar[dict[str, Any]] = {
        "type": "OBJECT",
        "properties": {
            "mileage": {"type": "INTEGER", "description": "The odometer reading value"},
            "confidence": {"type": "NUMBER", "description": "Confidence score between 0 and 1"},
        },
        "required": ["mileage", "confidence"],
    }

    mileage: int = Field(ge=0)
    """Total distance on the odometer, in km."""
    confidence: float
    """Provider confidence, clamped to ``[0, 1]``."""

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


class OdometerReading(BaseModel):
    """In-flight reading, mutated by :class:`~fleetvision.reconciler.OdometerReconciler`.

    ``state`` is always recomputed from the raw fields through
    :func:`~fleetvision.state.policy.derive_state`; never assign it directly.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    image_data: bytes = b""
    mime_type: str = "image/jpeg"
    image_ref: str = ""
    """Preview reference: a data URI of the capture or the placeholder URL."""
    vehicle_id: str | None = None
    manual_value: int | None = Field(default=None, ge=0)
    """User-entered mileage; ``None`` while the field is empty."""
    ai_value: int | None = Field(default=None, ge=0)
    confidence: float = 0.0
    state: ReadingState = ReadingState.IDLE
    saved: bool = False
    error_message: str | None = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_data)


class VerificationRecord(BaseModel):
    """A finalized, immutable reconciliation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    vehicle_id: str
    final_mileage: int = Field(ge=0)
    ai_mileage: int | None = Field(default=None, ge=0)
    confidence: float = 0.0
    image_ref: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    outcome: VerificationOutcome = VerificationOutcome.SUCCESS
