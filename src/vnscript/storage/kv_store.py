"""Blocking key-value stores used to persist save data."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from vnscript.config import get_logger
from vnscript.exceptions import SaveError

logger = get_logger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String values under string keys, read and written synchronously."""

    def get(self, key: str) -> str | None:
        """Return the value for ``key``, or None when absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...


class MemoryKeyValueStore:
    """In-process store, mainly for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """Store backed by a single JSON object on disk.

    A missing, unreadable or corrupt file reads as an empty store.
    """

    def __init__(self, path: Path | str) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding every key.
        """
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(
                "Unreadable store file treated as empty",
                path=str(self.path),
                error=str(e),
            )
            return {}
        if not isinstance(data, dict):
            logger.warning(
                "Store file is not a JSON object, treated as empty",
                path=str(self.path),
            )
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        """Write ``value`` and replace the file atomically.

        Raises:
            SaveError: If the file cannot be written.
        """
        data = self._read_all()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            Path(tmp_name).replace(self.path)
        except OSError as e:
            raise SaveError(
                message=f"Failed to write save file: {self.path}",
                hint="Check that the directory is writable",
                details={"file": str(self.path), "error": str(e)},
            ) from e
        logger.debug("Wrote store key", path=str(self.path), key=key)
