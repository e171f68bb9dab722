"""fleetvision - Async reconciliation engine for AI-assisted fleet document checks."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetvision")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetvision.auth import AuthService
from fleetvision.config import FleetVisionConfig
from fleetvision.console import FleetConsole
from fleetvision.directory import Directory
from fleetvision.exceptions import (
    AuthenticationError,
    DirectoryError,
    FleetValidationError,
    FleetVisionError,
    RecognitionConfigError,
    RecognitionError,
    RecognitionParseError,
    RecognitionTransportError,
    ReconciliationStateError,
)
from fleetvision.models import (
    DocumentAnalysis,
    DocumentClassification,
    FiscalNoteFilter,
    FiscalNoteItem,
    FiscalNoteStatus,
    OdometerAnalysis,
    OdometerReading,
    ReadingState,
    RecordStatus,
    UploadedImage,
    User,
    UserRole,
    Vehicle,
    VerificationRecord,
)
from fleetvision.reconciler import OdometerReconciler
from fleetvision.recognition.client import RecognitionClient, Recognizer
from fleetvision.state.policy import classify_document, derive_state
from fleetvision.state.store import FiscalNoteItemStore, HistoryEntry, ValidationRecordStore
from fleetvision.validator import FiscalNoteBatchValidator

__all__ = [
    "__version__",
    "AuthService",
    "AuthenticationError",
    "Directory",
    "DirectoryError",
    "DocumentAnalysis",
    "DocumentClassification",
    "FiscalNoteBatchValidator",
    "FiscalNoteFilter",
    "FiscalNoteItem",
    "FiscalNoteItemStore",
    "FiscalNoteStatus",
    "FleetConsole",
    "FleetValidationError",
    "FleetVisionConfig",
    "FleetVisionError",
    "HistoryEntry",
    "OdometerAnalysis",
    "OdometerReading",
    "OdometerReconciler",
    "ReadingState",
    "RecognitionClient",
    "RecognitionConfigError",
    "RecognitionError",
    "RecognitionParseError",
    "RecognitionTransportError",
    "Recognizer",
    "ReconciliationStateError",
    "RecordStatus",
    "UploadedImage",
    "User",
    "UserRole",
    "ValidationRecordStore",
    "Vehicle",
    "VerificationRecord",
    "classify_document",
    "derive_state",
]
