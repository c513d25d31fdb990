"""Save slot records and their repository."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vnscript.config import get_logger
from vnscript.exceptions import InvalidSlotError
from vnscript.storage.kv_store import KeyValueStore
from vnscript.types import NodeID, SlotID

logger = get_logger(__name__)

DEFAULT_SAVE_KEY = "galgame_saves_v1"
DEFAULT_SLOT_COUNT = 4


class SaveSlot(BaseModel):
    """A persisted snapshot of where the player was.

    Serialized with the short field names used by the stored collection
    (``id``, ``nodeId``, ``textSnippet``, ``date``, ``bg``); either name
    form is accepted when reading.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    slot_id: SlotID = Field(alias="id", ge=1)
    node_id: NodeID = Field(alias="nodeId", min_length=1)
    text_preview: str = Field(default="", alias="textSnippet")
    timestamp: datetime = Field(alias="date")
    background: str | None = Field(default=None, alias="bg")


class SaveRepository:
    """All save slots, stored as one JSON collection under a single key."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_SAVE_KEY,
        slot_count: int = DEFAULT_SLOT_COUNT,
    ) -> None:
        """Initialize the repository.

        Args:
            store: Key-value store holding the collection.
            key: Key the collection is stored under.
            slot_count: Slots are numbered 1 to slot_count.
        """
        self.store = store
        self.key = key
        self.slot_count = slot_count

    @property
    def slot_ids(self) -> range:
        return range(1, self.slot_count + 1)

    def check_slot(self, slot_id: SlotID) -> None:
        """Raise InvalidSlotError unless ``slot_id`` is within range."""
        if slot_id not in self.slot_ids:
            raise InvalidSlotError(slot_id, self.slot_count)

    def list_slots(self) -> list[SaveSlot]:
        """Return every readable save, ordered by slot id.

        Corrupt data reads as no saves; individually invalid entries are
        skipped.
        """
        by_id: dict[SlotID, SaveSlot] = {}
        for entry in self._read_entries():
            try:
                slot = SaveSlot.model_validate(entry)
            except ValidationError as e:
                logger.warning(
                    "Invalid save entry skipped", key=self.key, errors=e.error_count()
                )
                continue
            by_id[slot.slot_id] = slot
        return [by_id[slot_id] for slot_id in sorted(by_id)]

    def get(self, slot_id: SlotID) -> SaveSlot | None:
        """Return the save in ``slot_id``, or None if the slot is empty."""
        self.check_slot(slot_id)
        for slot in self.list_slots():
            if slot.slot_id == slot_id:
                return slot
        return None

    def put(self, slot: SaveSlot) -> None:
        """Write ``slot``, overwriting any save with the same id.

        Entries for other slots are written back as stored, including ones
        this version cannot read.
        """
        self.check_slot(slot.slot_id)
        entries = [e for e in self._read_entries() if _entry_id(e) != slot.slot_id]
        entries.append(slot.model_dump(mode="json", by_alias=True))
        self._write(entries)
        logger.info("Saved slot", slot=slot.slot_id, node_id=slot.node_id)

    def delete(self, slot_id: SlotID) -> bool:
        """Remove the save in ``slot_id``; returns whether one existed."""
        self.check_slot(slot_id)
        entries = self._read_entries()
        remaining = [e for e in entries if _entry_id(e) != slot_id]
        if len(remaining) == len(entries):
            return False
        self._write(remaining)
        return True

    def _read_entries(self) -> list[Any]:
        raw = self.store.get(self.key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(
                "Corrupt save collection ignored", key=self.key, error=str(e)
            )
            return []
        if not isinstance(entries, list):
            logger.warning("Save collection is not a list, ignored", key=self.key)
            return []
        return entries

    def _write(self, entries: list[Any]) -> None:
        self.store.set(self.key, json.dumps(entries, ensure_ascii=False))


def _entry_id(entry: Any) -> Any:
    """Slot id of a raw stored entry, whether or not the entry validates."""
    if isinstance(entry, dict):
        return entry.get("id", entry.get("slot_id"))
    return None
