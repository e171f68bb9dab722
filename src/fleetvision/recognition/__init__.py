"""Recognition layer.

This package wraps the external image-understanding capability behind the
:class:`~fleetvision.recognition.client.Recognizer` protocol.
"""

from fleetvision.recognition.client import RecognitionClient, Recognizer
from fleetvision.recognition.prompts import ODOMETER_INSTRUCTIONS, document_instructions

__all__ = [
    "ODOMETER_INSTRUCTIONS",
    "RecognitionClient",
    "Recognizer",
    "document_instructions",
]
