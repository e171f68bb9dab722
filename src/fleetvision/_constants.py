"""Internal constants shared across the library."""

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_REMEMBER_ME_NAMESPACE = "fleetvision"

#: Shown by a reading before any photo was captured.
PLACEHOLDER_IMAGE_URL = "https://static.fleetvision.app/placeholders/dashboard.jpg"

UNKNOWN_VEHICLE_LABEL = "Unknown vehicle"

# ------------------------------------------------------------------
# User-facing messages
# ------------------------------------------------------------------

MSG_MISSING_INVOICE_NUMBER = "Please enter the invoice (NF-e) number before uploading images."
MSG_UNREADABLE_FILE = "Could not read file"
MSG_ODOMETER_UNREADABLE = "Could not read the odometer. Try a clearer photo."
MSG_RECOGNITION_NOT_CONFIGURED = "Image recognition is not configured. Contact the administrator."
MSG_DOCUMENT_ANALYSIS_FAILED = "AI analysis failed"
MSG_NO_VEHICLE_SELECTED = "Register a vehicle in the fleet before validating readings."

# ------------------------------------------------------------------
# Demo directory seed
# ------------------------------------------------------------------

DEMO_VEHICLES: tuple[tuple[str, str, str, str], ...] = (
    ("1", "VOLVO FH 540", "ABC-1234", "active"),
    ("2", "SCANIA R 450", "XYZ-9876", "active"),
    ("3", "MERCEDES ACTROS", "DEF-5678", "inactive"),
)
DEMO_ADMIN_EMAIL = "admin@fleetvision.app"
DEMO_ADMIN_PASSWORD = "admin"
