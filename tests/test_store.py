from __future__ import annotations

import pytest

from fleetvision.directory import Directory
from fleetvision.models.fiscal_note import FiscalNoteItem, FiscalNoteStatus
from fleetvision.models.odometer import VerificationRecord
from fleetvision.state.store import FiscalNoteItemStore, ValidationRecordStore, history_entries


def _item(name: str) -> FiscalNoteItem:
    return FiscalNoteItem(file_name=name, image_ref=f"blob:{name}", expected_invoice_number="123")


def _record(vehicle_id: str, mileage: int) -> VerificationRecord:
    return VerificationRecord(vehicle_id=vehicle_id, final_mileage=mileage, ai_mileage=mileage, confidence=0.9)


def test_records_are_most_recent_first() -> None:
    store = ValidationRecordStore()
    first = _record("1", 100)
    second = _record("1", 200)

    store.prepend(first)
    store.prepend(second)

    assert [r.id for r in store.records] == [second.id, first.id]
    assert store.get(first.id) == first
    assert len(store) == 2


def test_record_cannot_be_stored_twice() -> None:
    store = ValidationRecordStore()
    record = _record("1", 100)
    store.prepend(record)

    with pytest.raises(ValueError):
        store.prepend(record)
    assert len(store) == 1


def test_records_filtered_per_vehicle_and_cleared() -> None:
    store = ValidationRecordStore()
    store.prepend(_record("1", 100))
    store.prepend(_record("2", 300))

    assert [r.final_mileage for r in store.for_vehicle("2")] == [300]

    store.clear()
    assert store.records == []


def test_records_snapshot_is_not_live() -> None:
    store = ValidationRecordStore()
    snapshot = store.records
    snapshot.append(_record("1", 1))
    assert len(store) == 0


def test_new_batch_is_listed_before_older_items() -> None:
    store = FiscalNoteItemStore()
    old_a, old_b = _item("a"), _item("b")
    new_c = _item("c")

    store.prepend_many([old_a, old_b])
    store.prepend_many([new_c])

    assert [i.file_name for i in store.items] == ["c", "a", "b"]


def test_upsert_replaces_by_id_without_moving_the_item() -> None:
    store = FiscalNoteItemStore()
    a, b = _item("a"), _item("b")
    store.prepend_many([a, b])

    updated = store.upsert_or_ignore(b.id, status=FiscalNoteStatus.VALIDATED)

    assert updated is not None
    assert updated.status == FiscalNoteStatus.VALIDATED
    assert [i.id for i in store.items] == [a.id, b.id]
    assert store.get(a.id) == a


def test_upsert_for_removed_item_is_ignored() -> None:
    store = FiscalNoteItemStore()
    a = _item("a")
    store.prepend_many([a])
    assert store.remove(a.id) is True

    assert store.upsert_or_ignore(a.id, status=FiscalNoteStatus.REJECTED) is None
    assert a.id not in store
    assert store.items == []


def test_remove_unknown_item_returns_false() -> None:
    store = FiscalNoteItemStore()
    assert store.remove("missing") is False


def test_history_labels_deleted_vehicles_as_unknown() -> None:
    directory = Directory.with_demo_data()
    store = ValidationRecordStore()
    store.prepend(_record("1", 100))
    store.prepend(_record("2", 200))
    directory.delete_vehicle("2")

    entries = history_entries(store.records, directory)

    assert entries[0].vehicle_label == "Unknown vehicle"
    assert not entries[0].vehicle_known
    assert entries[1].vehicle_label == "VOLVO FH 540 - ABC-1234"
    assert entries[1].vehicle_known
