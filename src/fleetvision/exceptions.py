"""Custom exception hierarchy for fleetvision."""

from __future__ import annotations


class FleetVisionError(Exception):
    """Base exception for all fleetvision errors."""


class RecognitionError(FleetVisionError):
    """Base for failures of the remote image recognition capability."""


class RecognitionConfigError(RecognitionError):
    """Recognition capability is not configured (e.g. missing API key).

    Fatal for the operation that needed it.  Callers surface it as a
    blocking message and never retry automatically.
    """


class RecognitionTransportError(RecognitionError):
    """Network or provider failure (connection error, timeout, non-200)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RecognitionParseError(RecognitionError):
    """Provider answered, but the body is malformed or off-schema."""

    def __init__(self, message: str, *, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


class FleetValidationError(FleetVisionError):
    """User input rejected before any side effect took place.

    The message is user-facing.
    """


class ReconciliationStateError(FleetVisionError):
    """Operation is not allowed in the current reading state.

    Raised e.g. when accepting a value for a reading that was already
    saved, which guards against finalizing the same reading twice.
    """


class AuthenticationError(FleetVisionError):
    """Login failed (unknown e-mail, inactive user or wrong password)."""


class DirectoryError(FleetVisionError):
    """Directory operation referenced an unknown vehicle or user."""
