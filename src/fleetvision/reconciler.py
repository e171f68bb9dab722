"""Odometer reconciliation.

Compares a manually entered mileage with the value a recognition call
extracts from a dashboard photo. A divergence is never resolved silently:
the user must either accept the AI value or edit the manual value until it
matches and confirm it.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from fleetvision._constants import (
    MSG_NO_VEHICLE_SELECTED,
    MSG_ODOMETER_UNREADABLE,
    MSG_RECOGNITION_NOT_CONFIGURED,
    MSG_UNREADABLE_FILE,
    PLACEHOLDER_IMAGE_URL,
)
from fleetvision.exceptions import (
    FleetValidationError,
    RecognitionConfigError,
    RecognitionError,
    ReconciliationStateError,
)
from fleetvision.models._base import to_data_uri
from fleetvision.models.directory import Vehicle
from fleetvision.models.odometer import (
    OdometerAnalysis,
    OdometerReading,
    ReadingState,
    VerificationRecord,
)
from fleetvision.recognition.client import Recognizer
from fleetvision.recognition.prompts import ODOMETER_INSTRUCTIONS
from fleetvision.state.policy import derive_state
from fleetvision.state.store import ValidationRecordStore

_logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


class VehicleRoster(Protocol):
    @property
    def vehicles(self) -> Sequence[Vehicle]:
        ...

    def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        ...


def parse_mileage(value: int | str | None) -> int | None:
    """Normalize a manual mileage entry.

    Strings keep only their digits (``"12.500 km"`` -> ``12500``); an empty
    entry is ``None``.  A leading minus sign is rejected for strings and
    integers alike.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise FleetValidationError("Mileage must be a number")
    if isinstance(value, int):
        if value < 0:
            raise FleetValidationError("Mileage cannot be negative")
        return value
    if value.strip().startswith("-"):
        raise FleetValidationError("Mileage cannot be negative")
    digits = _NON_DIGITS.sub("", value)
    return int(digits) if digits else None


class OdometerReconciler:
    """Drive one odometer reading from capture to a saved record.

    Usage::

        reconciler = OdometerReconciler(recognizer, records, vehicle_id="1")
        reading = await reconciler.capture_image(photo_bytes, "image/jpeg")
        if reading.state == ReadingState.DIVERGENCE:
            reconciler.accept_ai_value()
    """

    def __init__(
        self,
        recognizer: Recognizer,
        records: ValidationRecordStore,
        *,
        directory: VehicleRoster | None = None,
        vehicle_id: str | None = None,
        placeholder_image: str = PLACEHOLDER_IMAGE_URL,
        instructions: str = ODOMETER_INSTRUCTIONS,
    ) -> None:
        self._recognizer = recognizer
        self._records = records
        self._directory = directory
        self._placeholder_image = placeholder_image
        self._instructions = instructions
        self._reading = OdometerReading(image_ref=placeholder_image, vehicle_id=vehicle_id)
        # Bumped by every capture/reprocess/reset; results of older calls are dropped.
        self._attempt = 0
        self._analyzing = False
        self._failed = False
        self._last_error: RecognitionError | None = None
        self._pending: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def reading(self) -> OdometerReading:
        """Snapshot of the current reading (mutating it has no effect)."""
        return self._reading.model_copy()

    @property
    def state(self) -> ReadingState:
        return self._reading.state

    @property
    def last_error(self) -> RecognitionError | None:
        return self._last_error

    @property
    def vehicle_id(self) -> str | None:
        """The selected vehicle, falling back to the first directory vehicle."""
        selected = self._reading.vehicle_id
        if self._directory is None:
            return selected
        if selected is not None and self._directory.get_vehicle(selected) is not None:
            return selected
        vehicles = self._directory.vehicles
        return vehicles[0].id if vehicles else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _recompute(self) -> None:
        self._reading.state = derive_state(
            self._reading.manual_value,
            self._reading.ai_value,
            self._reading.saved,
            analyzing=self._analyzing,
            failed=self._failed,
        )

    def _require_not_saved(self, action: str) -> None:
        if self._reading.saved:
            raise ReconciliationStateError(f"Cannot {action}: reading already saved")

    def _begin_attempt(self) -> int:
        self._attempt += 1
        self._analyzing = True
        self._failed = False
        self._recompute()
        return self._attempt

    async def _run_recognition(self) -> None:
        await self._recognize(self._begin_attempt())

    async def _recognize(self, attempt: int) -> None:
        reading = self._reading
        try:
            analysis = await self._recognizer.analyze(
                reading.image_data,
                reading.mime_type,
                self._instructions,
                OdometerAnalysis,
            )
        except RecognitionError as exc:
            if attempt != self._attempt:
                _logger.debug("Dropping failure of superseded recognition attempt %d", attempt)
                return
            self.on_recognition_failure(exc)
            return
        except asyncio.CancelledError:
            if attempt == self._attempt:
                self._analyzing = False
                self._recompute()
            raise

        if attempt != self._attempt:
            _logger.debug("Dropping result of superseded recognition attempt %d", attempt)
            return
        self.on_recognition_result(analysis.mileage, analysis.confidence)

    def _prepare_capture(self, image: bytes, mime_type: str) -> None:
        if not image:
            raise FleetValidationError(MSG_UNREADABLE_FILE)
        reading = self._reading
        reading.saved = False
        reading.error_message = None
        reading.image_data = image
        reading.mime_type = mime_type
        reading.image_ref = to_data_uri(image, mime_type)
        reading.ai_value = None
        reading.confidence = 0.0
        self._last_error = None

    def _finalize(self, final_mileage: int) -> VerificationRecord:
        vehicle_id = self.vehicle_id
        if vehicle_id is None:
            raise FleetValidationError(MSG_NO_VEHICLE_SELECTED)
        reading = self._reading
        record = VerificationRecord(
            vehicle_id=vehicle_id,
            final_mileage=final_mileage,
            ai_mileage=reading.ai_value,
            confidence=reading.confidence,
            image_ref=reading.image_ref,
        )
        self._records.prepend(record)
        reading.vehicle_id = vehicle_id
        reading.saved = True
        self._recompute()
        _logger.info(
            "Odometer reading saved: vehicle=%s mileage=%d ai=%s",
            vehicle_id,
            final_mileage,
            reading.ai_value,
        )
        return record

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def capture_image(self, image: bytes, mime_type: str = "image/jpeg") -> OdometerReading:
        """Start a new reading from *image* and wait for its recognition.

        Any prior saved or error state is cleared; the manual value is kept so
        a mileage typed before the photo still counts.  The returned snapshot
        is already past ``ANALYZING``; use :meth:`start_capture` to keep
        editing while the call is in flight.
        """
        self._prepare_capture(image, mime_type)
        await self._run_recognition()
        return self.reading

    def start_capture(self, image: bytes, mime_type: str = "image/jpeg") -> OdometerReading:
        """Like :meth:`capture_image` but return the ``ANALYZING`` snapshot at once.

        Must be called from a running event loop.  Recognition continues in
        the background; :meth:`wait_until_settled` waits for it.
        """
        self._prepare_capture(image, mime_type)
        attempt = self._begin_attempt()
        task = asyncio.get_running_loop().create_task(self._recognize(attempt))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return self.reading

    async def wait_until_settled(self) -> None:
        """Wait until every background recognition has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def on_recognition_result(self, value: int, confidence: float) -> None:
        """Apply an AI-extracted mileage and recompute the state."""
        self._require_not_saved("apply a recognition result")
        reading = self._reading
        reading.ai_value = value
        reading.confidence = confidence
        # One-time convenience: only fills an empty (or zero) manual entry.
        if not reading.manual_value:
            reading.manual_value = value
        reading.error_message = None
        self._analyzing = False
        self._failed = False
        self._last_error = None
        self._recompute()

    def on_recognition_failure(self, error: Exception) -> None:
        """Record a failed recognition; the manual value is left untouched."""
        reading = self._reading
        reading.ai_value = None
        if isinstance(error, RecognitionConfigError):
            reading.error_message = MSG_RECOGNITION_NOT_CONFIGURED
        else:
            reading.error_message = MSG_ODOMETER_UNREADABLE
        self._last_error = error if isinstance(error, RecognitionError) else None
        self._analyzing = False
        self._failed = True
        self._recompute()
        _logger.warning("Odometer recognition failed: %s", error)

    def edit_manual_value(self, value: int | str | None) -> ReadingState:
        """Change the manual mileage; allowed while analyzing, never after saving."""
        self._require_not_saved("edit the mileage")
        self._reading.manual_value = parse_mileage(value)
        self._recompute()
        return self._reading.state

    def select_vehicle(self, vehicle_id: str) -> None:
        self._require_not_saved("change the vehicle")
        if self._directory is not None and self._directory.get_vehicle(vehicle_id) is None:
            raise FleetValidationError(f"Unknown vehicle: {vehicle_id}")
        self._reading.vehicle_id = vehicle_id

    def accept_ai_value(self) -> VerificationRecord:
        """Take the AI value as the final mileage and save the reading."""
        self._require_not_saved("accept the AI value")
        reading = self._reading
        if reading.ai_value is None or reading.state not in (ReadingState.MATCH, ReadingState.DIVERGENCE):
            raise ReconciliationStateError(f"No AI value to accept (state={reading.state})")
        if self.vehicle_id is None:
            raise FleetValidationError(MSG_NO_VEHICLE_SELECTED)
        reading.manual_value = reading.ai_value
        return self._finalize(reading.ai_value)

    def confirm_manual_value(self) -> VerificationRecord:
        """Save a manual value that matches the AI value."""
        self._require_not_saved("confirm the mileage")
        reading = self._reading
        if reading.state != ReadingState.MATCH or reading.manual_value is None:
            raise ReconciliationStateError(f"Manual value can only be confirmed on a match (state={reading.state})")
        return self._finalize(reading.manual_value)

    async def reprocess(self) -> OdometerReading:
        """Run recognition again on the current image; the manual value is kept."""
        self._require_not_saved("reprocess")
        if not self._reading.has_image:
            raise ReconciliationStateError("No image captured yet")
        self._reading.error_message = None
        await self._run_recognition()
        return self.reading

    def reset(self) -> None:
        """Start over with the placeholder image; in-flight results are dropped."""
        self._attempt += 1
        self._analyzing = False
        self._failed = False
        self._last_error = None
        self._reading = OdometerReading(
            image_ref=self._placeholder_image,
            vehicle_id=self._reading.vehicle_id,
        )
