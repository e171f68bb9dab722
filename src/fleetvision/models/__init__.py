"""Data models for fleetvision."""

from fleetvision.models._base import FleetBaseModel, FleetEnum, to_data_uri
from fleetvision.models.directory import RecordStatus, User, UserRole, Vehicle
from fleetvision.models.fiscal_note import (
    DocumentAnalysis,
    DocumentClassification,
    FiscalNoteFilter,
    FiscalNoteItem,
    FiscalNoteStatus,
    UploadedImage,
)
from fleetvision.models.odometer import (
    OdometerAnalysis,
    OdometerReading,
    ReadingState,
    VerificationOutcome,
    VerificationRecord,
)

__all__ = [
    "DocumentAnalysis",
    "DocumentClassification",
    "FiscalNoteFilter",
    "FiscalNoteItem",
    "FiscalNoteStatus",
    "FleetBaseModel",
    "FleetEnum",
    "OdometerAnalysis",
    "OdometerReading",
    "ReadingState",
    "RecordStatus",
    "UploadedImage",
    "User",
    "UserRole",
    "Vehicle",
    "VerificationOutcome",
    "VerificationRecord",
    "to_data_uri",
]
