# -*- coding: utf-8 -*-
"""JSON-file backed key-value store used for history and preferences."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

from medtriage.utils.file_utils import write_text_atomic

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """String key-value pairs kept in one JSON object on disk.

    Every `get` re-reads the file; every `set` rewrites it atomically.
    Raises OSError/ValueError on unreadable or corrupt files, callers decide
    how to degrade.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._io_lock = threading.Lock()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Expected JSON object in {self.path}")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        with self._io_lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._io_lock:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning("Store file %s is corrupt, rewriting it", self.path)
                data = {}
            data[key] = value
            write_text_atomic(self.path, json.dumps(data, indent=2, ensure_ascii=True) + "\n")
        logger.debug("Stored key %s (%d chars) in %s", key, len(value), self.path)


class MemoryStore:
    """In-process store, handy for previews and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
