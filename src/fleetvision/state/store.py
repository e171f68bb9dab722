"""In-memory, session-scoped stores.

These are the only components allowed to mutate the record and item
collections. All mutations are keyed by id; no caller ever addresses an
entry by position.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from fleetvision._constants import UNKNOWN_VEHICLE_LABEL
from fleetvision.models.directory import Vehicle
from fleetvision.models.fiscal_note import FiscalNoteItem
from fleetvision.models.odometer import VerificationRecord

_logger = logging.getLogger(__name__)


class VehicleLookup(Protocol):
    """Read access to the vehicle directory."""

    def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        ...


class ValidationRecordStore:
    """Completed reconciliations, most recent first.

    Records are immutable and only ever prepended; the store is cleared as a
    whole when the session ends.
    """

    def __init__(self) -> None:
        self._records: list[VerificationRecord] = []

    def prepend(self, record: VerificationRecord) -> None:
        if any(existing.id == record.id for existing in self._records):
            raise ValueError(f"record {record.id} already stored")
        self._records.insert(0, record)
        _logger.debug("Stored verification record %s (vehicle=%s)", record.id, record.vehicle_id)

    @property
    def records(self) -> list[VerificationRecord]:
        return list(self._records)

    def get(self, record_id: str) -> VerificationRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def for_vehicle(self, vehicle_id: str) -> list[VerificationRecord]:
        return [record for record in self._records if record.vehicle_id == vehicle_id]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class FiscalNoteItemStore:
    """Fiscal-note items keyed by id, kept in reverse-chronological order.

    Completions are applied through :meth:`upsert_or_ignore`: an update for
    an id that was removed meanwhile is dropped instead of re-adding it.
    """

    def __init__(self) -> None:
        self._items: dict[str, FiscalNoteItem] = {}
        self._order: list[str] = []

    def prepend_many(self, items: Iterable[FiscalNoteItem]) -> None:
        """Insert a new batch in front of everything already listed."""
        batch = list(items)
        for item in batch:
            if item.id in self._items:
                raise ValueError(f"item {item.id} already stored")
        for item in batch:
            self._items[item.id] = item
        self._order[:0] = [item.id for item in batch]

    def upsert_or_ignore(self, item_id: str, **changes: Any) -> FiscalNoteItem | None:
        """Replace the item *item_id* with a copy carrying *changes*.

        Returns the new item, or ``None`` when the id is no longer listed.
        """
        current = self._items.get(item_id)
        if current is None:
            _logger.debug("Ignoring update for removed item %s", item_id)
            return None
        updated = current.model_copy(update=changes)
        self._items[item_id] = updated
        return updated

    def remove(self, item_id: str) -> bool:
        if self._items.pop(item_id, None) is None:
            return False
        self._order.remove(item_id)
        return True

    def get(self, item_id: str) -> FiscalNoteItem | None:
        return self._items.get(item_id)

    @property
    def items(self) -> list[FiscalNoteItem]:
        return [self._items[item_id] for item_id in self._order]

    def clear(self) -> None:
        self._items.clear()
        self._order.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)


class HistoryEntry(BaseModel):
    """A record paired with the label of its vehicle at read time."""

    model_config = ConfigDict(frozen=True)

    record: VerificationRecord
    vehicle_label: str

    @property
    def vehicle_known(self) -> bool:
        return self.vehicle_label != UNKNOWN_VEHICLE_LABEL


def history_entries(records: Iterable[VerificationRecord], vehicles: VehicleLookup) -> list[HistoryEntry]:
    """Label records for display; vehicles deleted since are shown as unknown."""
    entries: list[HistoryEntry] = []
    for record in records:
        vehicle = vehicles.get_vehicle(record.vehicle_id)
        label = vehicle.label if vehicle is not None else UNKNOWN_VEHICLE_LABEL
        entries.append(HistoryEntry(record=record, vehicle_label=label))
    return entries
