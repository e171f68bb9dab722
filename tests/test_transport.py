from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from fleetvision._transport import HttpTransport
from fleetvision.config import FleetVisionConfig
from fleetvision.exceptions import RecognitionConfigError, RecognitionTransportError

_ENDPOINT = "/v1beta/models/test-model:generateContent"


def _config(server: test_utils.TestServer, **overrides: Any) -> FleetVisionConfig:
    return FleetVisionConfig(
        api_key="secret-key",
        base_url=f"http://{server.host}:{server.port}/",
        **overrides,
    )


def _app(handler: Callable[[web.Request], Awaitable[web.StreamResponse]]) -> web.Application:
    app = web.Application()
    app.router.add_post("/v1beta/models/{name}", handler)
    return app


@pytest.mark.asyncio
async def test_post_json_sends_key_and_returns_object() -> None:
    seen: dict[str, object] = {}

    async def handler(request: web.Request) -> web.Response:
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["name"] = request.match_info["name"]
        seen["body"] = await request.json()
        return web.json_response({"candidates": []})

    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        result = await transport.post_json(_ENDPOINT, {"contents": []})

    assert result == {"candidates": []}
    assert seen == {"key": "secret-key", "name": "test-model:generateContent", "body": {"contents": []}}


@pytest.mark.asyncio
async def test_non_200_status_is_a_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=503, text="overloaded")

    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(RecognitionTransportError) as exc_info:
            await transport.post_json(_ENDPOINT, {})

    assert exc_info.value.status_code == 503
    assert exc_info.value.endpoint == _ENDPOINT
    assert "overloaded" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_api_key_is_a_configuration_error(status: int) -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"error": {"message": "API key not valid"}}, status=status)

    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(RecognitionConfigError, match=f"HTTP {status}") as exc_info:
            await transport.post_json(_ENDPOINT, {})

    assert not isinstance(exc_info.value, RecognitionTransportError)
    assert "API key not valid" in str(exc_info.value)


@pytest.mark.asyncio
async def test_slow_provider_times_out() -> None:
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server, request_timeout=0.05), session)
        with pytest.raises(RecognitionTransportError, match="timed out"):
            await transport.post_json(_ENDPOINT, {})


@pytest.mark.asyncio
async def test_non_json_body_is_a_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="<html>proxy error</html>")

    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(RecognitionTransportError, match="Invalid JSON"):
            await transport.post_json(_ENDPOINT, {})


@pytest.mark.asyncio
async def test_trace_logging_redacts_payload(caplog: pytest.LogCaptureFixture) -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"ok": True})

    payload = {"contents": [{"parts": [{"inlineData": {"mimeType": "image/jpeg", "data": "A" * 4000}}]}]}
    async with test_utils.TestServer(_app(handler)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server, api_trace_enabled=True), session)
        with caplog.at_level(logging.DEBUG, logger="fleetvision._transport"):
            await transport.post_json(_ENDPOINT, payload)

    assert "<blob:4000>" in caplog.text
    assert "A" * 100 not in caplog.text
