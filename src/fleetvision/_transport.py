"""HTTP transport for the recognition provider."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fleetvision._redact import redact_for_log
from fleetvision.config import FleetVisionConfig
from fleetvision.exceptions import RecognitionConfigError, RecognitionTransportError

_logger = logging.getLogger(__name__)

USER_AGENT = "fleetvision/1 (+aiohttp)"

_BODY_EXCERPT = 200

# An invalid or revoked key is a configuration problem, not a network one.
_CREDENTIAL_REJECTED = frozenset({401, 403})


class Transport(Protocol):
    """What :class:`~fleetvision.recognition.client.RecognitionClient` needs from the wire.

    Tests substitute small fakes; production uses :class:`HttpTransport`.
    """

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class HttpTransport:
    """JSON POSTs against the provider, authenticated by API key.

    A 401 or 403 answer means the key was rejected and raises
    :class:`RecognitionConfigError`.  Every request is bounded by
    ``config.request_timeout`` seconds in total; expiry surfaces as
    :class:`RecognitionTransportError` like any other network failure.
    """

    def __init__(
        self,
        config: FleetVisionConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _url(self, endpoint: str) -> str:
        return self._config.base_url.rstrip("/") + endpoint

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        if self._config.api_key:
            headers["x-goog-api-key"] = self._config.api_key
        return headers

    async def _send(self, endpoint: str, body: str) -> tuple[int, str]:
        try:
            async with self._http.post(
                self._url(endpoint),
                data=body,
                headers=self._headers(),
                timeout=self._timeout,
            ) as resp:
                return resp.status, await resp.text()
        except TimeoutError as exc:
            raise RecognitionTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise RecognitionTransportError(
                f"Could not reach provider at {endpoint}: {exc}",
                endpoint=endpoint,
            ) from exc

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """POST *payload* and return the decoded JSON object of a 200 answer."""
        trace = self._config.api_trace_enabled
        _logger.debug("POST %s", endpoint)
        if trace:
            _logger.debug("Request body: %s", redact_for_log(payload))

        status, text = await self._send(endpoint, json.dumps(payload, separators=(",", ":")))
        if status in _CREDENTIAL_REJECTED:
            raise RecognitionConfigError(
                f"Provider rejected the API key (HTTP {status}) for {endpoint}: {text[:_BODY_EXCERPT]}"
            )
        if status != 200:
            raise RecognitionTransportError(
                f"Provider answered HTTP {status} for {endpoint}: {text[:_BODY_EXCERPT]}",
                status_code=status,
                endpoint=endpoint,
            )

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RecognitionTransportError(
                f"Invalid JSON in provider answer for {endpoint}: {text[:_BODY_EXCERPT]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc
        if not isinstance(decoded, dict):
            raise RecognitionTransportError(
                f"Provider answer for {endpoint} is a {type(decoded).__name__}, expected an object",
                status_code=status,
                endpoint=endpoint,
            )

        if trace:
            _logger.debug("Response body: %s", redact_for_log(decoded))
        return decoded
