"""Persistence of save slots."""

from __future__ import annotations

from .kv_store import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .saves import SaveRepository, SaveSlot

__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SaveRepository",
    "SaveSlot",
]
