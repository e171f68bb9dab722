"""Provider request/response envelope handling.

This module centralizes the provider-specific shape:
- building a ``generateContent`` request with an inline image part
- extracting the candidate text from a response
- stripping formatting the provider may wrap around the JSON payload

It is internal to fleetvision and may change at any time.
"""

from __future__ import annotations

import base64
import json
import re
from collections.abc import Mapping
from typing import Any

from fleetvision.exceptions import RecognitionParseError

_FENCE_OPEN = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def generate_content_endpoint(model: str) -> str:
    return f"/v1beta/models/{model}:generateContent"


def build_generate_request(
    image: bytes,
    mime_type: str,
    instructions: str,
    response_schema: Mapping[str, Any],
) -> dict[str, Any]:
    """Build the request body for one image + instruction prompt.

    Parameters
    ----------
    image : bytes
        Raw image bytes (any common raster format).
    mime_type : str
        MIME type of *image*.
    instructions : str
        Natural-language instructions for the model.
    response_schema : Mapping
        Structured-output schema the answer must follow.

    Returns
    -------
    dict
        JSON-serializable request body.
    """
    return {
        "contents": [
            {
                "parts": [
                    {
                        "inlineData": {
                            "mimeType": mime_type,
                            "data": base64.b64encode(image).decode("ascii"),
                        }
                    },
                    {"text": instructions},
                ]
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": dict(response_schema),
        },
    }


def extract_text(response: Mapping[str, Any]) -> str:
    """Concatenate the text parts of the first candidate.

    Raises
    ------
    RecognitionParseError
        If the response carries no candidate text.
    """
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        feedback = response.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        suffix = f" (blocked: {reason})" if reason else ""
        raise RecognitionParseError(f"No response from the AI{suffix}")

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise RecognitionParseError("No response from the AI")

    text = "".join(str(part["text"]) for part in parts if isinstance(part, dict) and "text" in part)
    if not text.strip():
        raise RecognitionParseError("No response from the AI")
    return text


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```), if any."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    return _FENCE_CLOSE.sub("", stripped, count=1).strip()


def decode_structured(text: str) -> dict[str, Any]:
    """Decode the structured JSON object carried in *text*."""
    cleaned = strip_code_fence(text)
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise RecognitionParseError(
            f"Could not interpret the AI response: {cleaned[:64]}",
            raw_text=text,
        ) from exc
    if not isinstance(decoded, dict):
        raise RecognitionParseError(
            f"AI response is not an object: {type(decoded).__name__}",
            raw_text=text,
        )
    return decoded
