"""High-level async entry point wiring the validation engine together."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

import aiohttp

from fleetvision._transport import HttpTransport, Transport
from fleetvision.auth import AuthService
from fleetvision.config import FleetVisionConfig
from fleetvision.directory import Directory
from fleetvision.exceptions import FleetVisionError
from fleetvision.models.directory import User
from fleetvision.reconciler import OdometerReconciler
from fleetvision.recognition.client import RecognitionClient, Recognizer
from fleetvision.state.store import HistoryEntry, ValidationRecordStore, history_entries
from fleetvision.validator import FiscalNoteBatchValidator

_logger = logging.getLogger(__name__)


class FleetConsole:
    """Session-scoped fleet operations console.

    Usage::

        async with FleetConsole(FleetVisionConfig.from_env()) as console:
            console.login("admin@fleetvision.app", "admin")
            reconciler = console.odometer_reconciler(vehicle_id="1")
            await reconciler.capture_image(photo)

    The directory owns vehicles and users, the console owns the record
    store; both are handed to the components explicitly.
    """

    def __init__(
        self,
        config: FleetVisionConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        recognizer: Recognizer | None = None,
        directory: Directory | None = None,
        hint_store: MutableMapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._recognizer = recognizer
        self.directory = directory if directory is not None else Directory.with_demo_data()
        self.records = ValidationRecordStore()
        self.auth = AuthService(
            self.directory,
            self.records,
            hint_store=hint_store,
            namespace=config.remember_me_namespace,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetConsole:
        if self._recognizer is None:
            if self._transport is None:
                if self._http_session is None:
                    self._http_session = aiohttp.ClientSession()
                self._transport = HttpTransport(self._config, self._http_session)
            self._recognizer = RecognitionClient(self._config, self._transport)
        if not self._config.has_credentials:
            _logger.warning("No recognition API key configured; image analysis will fail")
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.auth.logout()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_recognizer(self) -> Recognizer:
        if self._recognizer is None:
            raise FleetVisionError("Console not initialized. Use 'async with FleetConsole(...) as console:'")
        return self._recognizer

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def login(self, email: str, password: str, *, remember: bool = False) -> User:
        return self.auth.login(email, password, remember=remember)

    def logout(self) -> None:
        self.auth.logout()

    # ------------------------------------------------------------------
    # Validation components
    # ------------------------------------------------------------------

    def odometer_reconciler(self, vehicle_id: str | None = None) -> OdometerReconciler:
        return OdometerReconciler(
            self._require_recognizer(),
            self.records,
            directory=self.directory,
            vehicle_id=vehicle_id,
        )

    def fiscal_note_validator(self) -> FiscalNoteBatchValidator:
        return FiscalNoteBatchValidator(self._require_recognizer())

    def history(self) -> list[HistoryEntry]:
        """Saved readings, most recent first, labelled with their vehicle."""
        return history_entries(self.records.records, self.directory)
