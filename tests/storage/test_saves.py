"""Tests for save slot records and the save repository."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from vnscript.exceptions import InvalidSlotError
from vnscript.storage import MemoryKeyValueStore, SaveRepository, SaveSlot

KEY = "galgame_saves_v1"
WHEN = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def make_slot(slot_id, node_id="start", **kwargs):
    return SaveSlot(
        slot_id=slot_id,
        node_id=node_id,
        text_preview=kwargs.pop("text_preview", "Hello..."),
        timestamp=kwargs.pop("timestamp", WHEN),
        **kwargs,
    )


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def repository(store):
    return SaveRepository(store)


class TestSaveSlot:
    def test_serializes_with_storage_names(self):
        data = make_slot(2, "node_3", background="bg/room.png").model_dump(
            mode="json", by_alias=True
        )
        assert data == {
            "id": 2,
            "nodeId": "node_3",
            "textSnippet": "Hello...",
            "date": "2024-05-01T12:30:00Z",
            "bg": "bg/room.png",
        }

    def test_accepts_storage_names(self):
        slot = SaveSlot.model_validate(
            {"id": 1, "nodeId": "start", "textSnippet": "x", "date": WHEN.isoformat()}
        )
        assert slot.slot_id == 1
        assert slot.background is None

    def test_rejects_non_positive_slot(self):
        with pytest.raises(ValidationError):
            make_slot(0)

    def test_is_frozen(self):
        slot = make_slot(1)
        with pytest.raises(ValidationError):
            slot.node_id = "other"


class TestSaveRepository:
    """Slot collection reads and writes."""

    def test_empty(self, repository):
        assert repository.list_slots() == []
        assert repository.get(1) is None

    def test_put_and_get(self, repository):
        repository.put(make_slot(3, "node_1"))
        assert repository.get(3).node_id == "node_1"

    def test_put_overwrites_same_slot(self, repository, store):
        repository.put(make_slot(1, "a"))
        repository.put(make_slot(1, "b"))
        assert [s.node_id for s in repository.list_slots()] == ["b"]
        assert len(json.loads(store.get(KEY))) == 1

    def test_list_is_sorted_by_slot(self, repository):
        for slot_id in (4, 1, 3):
            repository.put(make_slot(slot_id))
        assert [s.slot_id for s in repository.list_slots()] == [1, 3, 4]

    def test_delete(self, repository):
        repository.put(make_slot(2))
        assert repository.delete(2) is True
        assert repository.delete(2) is False
        assert repository.list_slots() == []

    @pytest.mark.parametrize("slot_id", [0, 5, -1])
    def test_slot_range(self, repository, slot_id):
        with pytest.raises(InvalidSlotError):
            repository.get(slot_id)

    def test_put_checks_range(self, store):
        repository = SaveRepository(store, slot_count=2)
        with pytest.raises(InvalidSlotError, match="between 1 and 2"):
            repository.put(make_slot(3))

    def test_custom_key(self, store):
        SaveRepository(store, key="other").put(make_slot(1))
        assert store.get("other") is not None
        assert store.get(KEY) is None

    @pytest.mark.parametrize("raw", ["not json", '{"id": 1}', "null"])
    def test_corrupt_collection_reads_as_empty(self, store, raw):
        store.set(KEY, raw)
        assert SaveRepository(store).list_slots() == []

    def test_invalid_entries_are_skipped(self, store):
        valid = make_slot(2).model_dump(mode="json", by_alias=True)
        store.set(KEY, json.dumps([{"id": "x"}, valid, "junk"]))
        assert [s.slot_id for s in SaveRepository(store).list_slots()] == [2]

    def test_reads_legacy_records(self, store):
        """Records written with locale date strings fail validation and are skipped."""
        legacy = {"id": 1, "nodeId": "start", "textSnippet": "x", "date": "5/1/2024"}
        current = make_slot(2).model_dump(mode="json", by_alias=True)
        store.set(KEY, json.dumps([legacy, current]))
        assert [s.slot_id for s in SaveRepository(store).list_slots()] == [2]

    def test_put_keeps_unreadable_entries_of_other_slots(self, store):
        legacy = {"id": 1, "nodeId": "start", "date": "2024/5/1 12:00:00"}
        store.set(KEY, json.dumps([legacy]))
        repository = SaveRepository(store)

        repository.put(make_slot(2, "node_4"))

        stored = json.loads(store.get(KEY))
        assert legacy in stored
        assert sorted(entry["id"] for entry in stored) == [1, 2]
        assert [s.slot_id for s in repository.list_slots()] == [2]

    def test_put_replaces_unreadable_entry_of_same_slot(self, store):
        store.set(KEY, json.dumps([{"id": 1, "nodeId": "start", "date": "5/1/2024"}]))
        SaveRepository(store).put(make_slot(1, "node_2"))
        stored = json.loads(store.get(KEY))
        assert [entry["nodeId"] for entry in stored] == ["node_2"]

    def test_delete_keeps_unreadable_entries_of_other_slots(self, store):
        legacy = {"id": 1, "nodeId": "start", "date": "5/1/2024"}
        current = make_slot(2).model_dump(mode="json", by_alias=True)
        store.set(KEY, json.dumps([legacy, current, "junk"]))

        assert SaveRepository(store).delete(2) is True
        assert json.loads(store.get(KEY)) == [legacy, "junk"]

    def test_delete_of_unreadable_entry(self, store):
        store.set(KEY, json.dumps([{"id": 3, "date": "yesterday"}]))
        repository = SaveRepository(store)
        assert repository.delete(3) is True
        assert json.loads(store.get(KEY)) == []
