from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from fleetvision.config import FleetVisionConfig
from fleetvision.console import FleetConsole
from fleetvision.exceptions import FleetVisionError, RecognitionTransportError
from fleetvision.models.fiscal_note import FiscalNoteFilter, FiscalNoteStatus, UploadedImage
from fleetvision.models.odometer import ReadingState


@dataclass
class FakeVisionProvider:
    """Answers ``generateContent`` requests keyed by the decoded image bytes."""

    answers: dict[bytes, Any] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(endpoint)
        image_part = payload["contents"][0]["parts"][0]["inlineData"]
        image = base64.b64decode(image_part["data"])
        answer = self.answers.get(image)
        if answer is None:
            raise AssertionError(f"Unexpected image in fake provider: {image!r}")
        if isinstance(answer, Exception):
            raise answer
        text = answer if isinstance(answer, str) else json.dumps(answer)
        return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def config() -> FleetVisionConfig:
    return FleetVisionConfig(api_key="test-key", model="test-model")


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch) -> FakeVisionProvider:
    fake_provider = FakeVisionProvider()

    async def fake_post_json(_self: Any, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        return await fake_provider.post_json(endpoint, payload)

    monkeypatch.setattr("fleetvision._transport.HttpTransport.post_json", fake_post_json)
    return fake_provider


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_console_happy_path(config: FleetVisionConfig, provider: FakeVisionProvider) -> None:
    provider.answers[b"dashboard"] = '```json\n{"mileage": 12580, "confidence": 0.93}\n```'
    provider.answers[b"receipt"] = {
        "classification": "RECEIPT",
        "foundNumber": "4567",
        "numberMatches": True,
        "hasSignature": True,
        "confidence": 0.97,
    }
    provider.answers[b"boxes"] = {
        "classification": "GOODS",
        "numberMatches": False,
        "hasSignature": False,
        "confidence": 0.6,
    }
    provider.answers[b"blurry"] = RecognitionTransportError("HTTP 500 from provider", status_code=500)
    hints: dict[str, str] = {}

    async with FleetConsole(config, hint_store=hints) as console:
        console.login("admin@fleetvision.app", "admin", remember=True)

        reconciler = console.odometer_reconciler(vehicle_id="2")
        reconciler.edit_manual_value("12.500")
        reading = await reconciler.capture_image(b"dashboard")
        assert reading.state == ReadingState.DIVERGENCE
        record = reconciler.accept_ai_value()
        assert record.final_mileage == 12580

        validator = console.fiscal_note_validator()
        items = await validator.validate_batch(
            [
                UploadedImage(file_name="receipt.jpg", data=b"receipt"),
                UploadedImage(file_name="boxes.jpg", data=b"boxes"),
                UploadedImage(file_name="blurry.jpg", data=b"blurry"),
            ],
            "4567",
        )
        assert [i.status for i in items] == [
            FiscalNoteStatus.VALIDATED,
            FiscalNoteStatus.REVIEW,
            FiscalNoteStatus.REJECTED,
        ]
        assert validator.counts()[FiscalNoteFilter.REVIEW] == 2

        console.directory.delete_vehicle("2")
        (entry,) = console.history()
        assert entry.record == record
        assert entry.vehicle_label == "Unknown vehicle"

        console.logout()
        assert console.history() == []

    assert provider.calls == ["/v1beta/models/test-model:generateContent"] * 4
    assert hints == {"fleetvision:remembered_email": "admin@fleetvision.app"}


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_missing_api_key_surfaces_as_reading_error(provider: FakeVisionProvider) -> None:
    async with FleetConsole(FleetVisionConfig()) as console:
        reconciler = console.odometer_reconciler()
        reading = await reconciler.capture_image(b"dashboard")

    assert reading.state == ReadingState.ERROR
    assert reading.error_message == "Image recognition is not configured. Contact the administrator."
    assert provider.calls == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_components_require_an_entered_console(config: FleetVisionConfig) -> None:
    console = FleetConsole(config)

    with pytest.raises(FleetVisionError):
        console.odometer_reconciler()
    with pytest.raises(FleetVisionError):
        console.fiscal_note_validator()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_leaving_the_console_ends_the_session(config: FleetVisionConfig, provider: FakeVisionProvider) -> None:
    provider.answers[b"dashboard"] = {"mileage": 100, "confidence": 0.9}

    async with FleetConsole(config) as console:
        console.login("admin@fleetvision.app", "admin")
        reconciler = console.odometer_reconciler(vehicle_id="1")
        await reconciler.capture_image(b"dashboard")
        reconciler.confirm_manual_value()
        assert len(console.records) == 1

    assert not console.auth.is_authenticated
    assert len(console.records) == 0
