"""Async client for the external image recognition capability."""

from __future__ import annotations

import logging
import time
from typing import Protocol, TypeVar

from pydantic import ValidationError

from fleetvision._transport import Transport
from fleetvision.config import FleetVisionConfig
from fleetvision.exceptions import RecognitionConfigError, RecognitionParseError
from fleetvision.models._base import FleetBaseModel
from fleetvision.recognition._envelope import (
    build_generate_request,
    decode_structured,
    extract_text,
    generate_content_endpoint,
)

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=FleetBaseModel)


class Recognizer(Protocol):
    """Anything able to turn an image plus instructions into structured data.

    Implementations raise a :class:`~fleetvision.exceptions.RecognitionError`
    subclass on failure and never retry on their own.
    """

    async def analyze(
        self,
        image: bytes,
        mime_type: str,
        instructions: str,
        response_model: type[TModel],
    ) -> TModel:
        ...


class RecognitionClient:
    """:class:`Recognizer` backed by a ``generateContent``-style provider.

    Every call is an independent request; concurrent calls never wait on
    each other.
    """

    def __init__(self, config: FleetVisionConfig, transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def analyze(
        self,
        image: bytes,
        mime_type: str,
        instructions: str,
        response_model: type[TModel],
    ) -> TModel:
        """Run one recognition request and validate the answer.

        Parameters
        ----------
        image : bytes
            Raw image bytes.
        mime_type : str
            MIME type of *image*.
        instructions : str
            Natural-language prompt.
        response_model : type
            Model class whose ``RESPONSE_SCHEMA`` is sent to the provider and
            which validates the answer.

        Returns
        -------
        FleetBaseModel
            Instance of *response_model*.

        Raises
        ------
        RecognitionConfigError
            If no API key is configured (raised before any I/O) or the
            provider rejects the key with HTTP 401/403.
        RecognitionTransportError
            On network/provider failure or timeout.
        RecognitionParseError
            If the answer is empty, not JSON, or does not match the schema.
        """
        if not self._config.has_credentials:
            raise RecognitionConfigError("API key not configured")

        endpoint = generate_content_endpoint(self._config.model)
        request = build_generate_request(
            image,
            mime_type,
            instructions,
            response_model.RESPONSE_SCHEMA,  # type: ignore[attr-defined]
        )

        started = time.monotonic()
        response = await self._transport.post_json(endpoint, request)
        _logger.debug(
            "Recognition %s answered in %.2fs (%d image bytes)",
            response_model.__name__,
            time.monotonic() - started,
            len(image),
        )

        text = extract_text(response)
        data = decode_structured(text)
        try:
            return response_model.model_validate(data)
        except ValidationError as exc:
            raise RecognitionParseError(
                f"AI response does not match the {response_model.__name__} schema: "
                f"{exc.error_count()} error(s)",
                raw_text=text,
            ) from exc
