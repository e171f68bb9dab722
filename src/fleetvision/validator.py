"""Fiscal-note batch validation.

A batch is a set of photos that should all prove delivery of one invoice.
Each photo gets a visible ``processing`` placeholder immediately; its
recognition call then runs as an independent task and the outcome is
written back by item id, in whatever order the calls complete.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from fleetvision._constants import (
    MSG_DOCUMENT_ANALYSIS_FAILED,
    MSG_MISSING_INVOICE_NUMBER,
    MSG_RECOGNITION_NOT_CONFIGURED,
    MSG_UNREADABLE_FILE,
)
from fleetvision.exceptions import FleetValidationError, RecognitionConfigError, RecognitionError
from fleetvision.models.fiscal_note import (
    DocumentAnalysis,
    FiscalNoteFilter,
    FiscalNoteItem,
    FiscalNoteStatus,
    UploadedImage,
)
from fleetvision.recognition.client import Recognizer
from fleetvision.recognition.prompts import document_instructions
from fleetvision.state.policy import classify_document, matches_filter
from fleetvision.state.store import FiscalNoteItemStore

_logger = logging.getLogger(__name__)


class FiscalNoteBatchValidator:
    """Validate delivery-document photos against an expected invoice number.

    Usage::

        validator = FiscalNoteBatchValidator(recognizer)
        placeholders = validator.submit_batch(files, "123456")
        await validator.wait_until_settled()
        validated = validator.filter_items(FiscalNoteFilter.VALIDATED)
    """

    def __init__(self, recognizer: Recognizer, items: FiscalNoteItemStore | None = None) -> None:
        self._recognizer = recognizer
        self._items = items if items is not None else FiscalNoteItemStore()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def items(self) -> list[FiscalNoteItem]:
        """All listed items, newest batch first."""
        return self._items.items

    @property
    def is_processing(self) -> bool:
        """Batch-level indicator: some analysis is still outstanding."""
        return any(not task.done() for task in self._pending)

    def get_item(self, item_id: str) -> FiscalNoteItem | None:
        return self._items.get(item_id)

    def submit_batch(
        self,
        files: Iterable[UploadedImage],
        expected_invoice_number: str,
    ) -> list[FiscalNoteItem]:
        """Create placeholders for *files* and start analyzing each of them.

        Must be called from a running event loop. Returns the ``processing``
        placeholders before any recognition call has resolved.

        Raises
        ------
        FleetValidationError
            If *expected_invoice_number* is empty; nothing is created then.
        """
        placeholders, _ = self._submit(files, expected_invoice_number)
        return placeholders

    async def validate_batch(
        self,
        files: Iterable[UploadedImage],
        expected_invoice_number: str,
    ) -> list[FiscalNoteItem]:
        """Submit a batch and wait for it; returns its items still listed."""
        placeholders, tasks = self._submit(files, expected_invoice_number)
        if tasks:
            await asyncio.gather(*tasks)
        ids = {item.id for item in placeholders}
        return [item for item in self._items.items if item.id in ids]

    def _submit(
        self,
        files: Iterable[UploadedImage],
        expected_invoice_number: str,
    ) -> tuple[list[FiscalNoteItem], list[asyncio.Task[None]]]:
        number = (expected_invoice_number or "").strip()
        if not number:
            raise FleetValidationError(MSG_MISSING_INVOICE_NUMBER)

        uploads = list(files)
        if not uploads:
            return [], []

        loop = asyncio.get_running_loop()
        placeholders = [
            FiscalNoteItem(
                file_name=upload.file_name,
                image_ref=upload.data_uri() if upload.is_readable else "",
                expected_invoice_number=number,
            )
            for upload in uploads
        ]
        self._items.prepend_many(placeholders)
        _logger.debug("Submitted %d file(s) for invoice %s", len(placeholders), number)

        tasks: list[asyncio.Task[None]] = []
        for item, upload in zip(placeholders, uploads, strict=True):
            task = loop.create_task(
                self._analyze_item(item.id, upload, number),
                name=f"fiscal-note-{item.id}",
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            tasks.append(task)
        return placeholders, tasks

    async def wait_until_settled(self) -> None:
        """Wait until every submitted analysis has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _analyze_item(self, item_id: str, upload: UploadedImage, expected_invoice_number: str) -> None:
        if not upload.is_readable:
            self._items.upsert_or_ignore(
                item_id,
                status=FiscalNoteStatus.REJECTED,
                error_message=MSG_UNREADABLE_FILE,
            )
            return

        try:
            analysis = await self._recognizer.analyze(
                upload.data,
                upload.mime_type,
                document_instructions(expected_invoice_number),
                DocumentAnalysis,
            )
        except RecognitionError as exc:
            _logger.warning("Analysis of %s (%s) failed: %s", upload.file_name, item_id, exc)
            if isinstance(exc, RecognitionConfigError):
                message = MSG_RECOGNITION_NOT_CONFIGURED
            else:
                message = str(exc) or MSG_DOCUMENT_ANALYSIS_FAILED
            self._items.upsert_or_ignore(item_id, status=FiscalNoteStatus.REJECTED, error_message=message)
            return
        except Exception:
            # A single item must never take the batch down with it.
            _logger.exception("Unexpected error analyzing %s (%s)", upload.file_name, item_id)
            self._items.upsert_or_ignore(
                item_id,
                status=FiscalNoteStatus.REJECTED,
                error_message=MSG_DOCUMENT_ANALYSIS_FAILED,
            )
            return

        status = classify_document(analysis)
        updated = self._items.upsert_or_ignore(item_id, status=status, ai_data=analysis)
        if updated is not None:
            _logger.debug("Item %s settled as %s", item_id, status)

    def remove_item(self, item_id: str) -> bool:
        """Remove an item; safe while its analysis is still in flight."""
        return self._items.remove(item_id)

    def clear(self) -> None:
        self._items.clear()

    def filter_items(self, bucket: FiscalNoteFilter = FiscalNoteFilter.ALL) -> list[FiscalNoteItem]:
        return [item for item in self._items.items if matches_filter(item.status, bucket)]

    def counts(self) -> dict[FiscalNoteFilter, int]:
        """Item counts per bucket (``REVIEW`` includes rejected items)."""
        items = self._items.items
        return {bucket: sum(1 for item in items if matches_filter(item.status, bucket)) for bucket in FiscalNoteFilter}
