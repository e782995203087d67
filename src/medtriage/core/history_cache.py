# -*- coding: utf-8 -*-
"""Bounded, ordered, persistent history of analysis results."""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable

from medtriage.constants import HISTORY_CAPACITY, HISTORY_KEY
from medtriage.errors import MalformedResult, PersistenceError
from medtriage.models.analysis_result import AnalysisResult
from medtriage.models.history_entry import HistoryEntry
from medtriage.utils.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


class HistoryCache:
    """Most-recent-first list of HistoryEntry kept in a key-value store.

    The store is the only source of truth: every operation re-reads it and
    nothing is cached between calls. `append` holds an internal lock for
    its whole read-modify-write cycle, so one HistoryCache must be shared by
    everyone writing to the same store.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        capacity: int = HISTORY_CAPACITY,
        key: str = HISTORY_KEY,
        clock: Clock | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.store = store
        self.capacity = int(capacity)
        self.key = key
        self._clock = clock or _now_millis
        self._lock = threading.Lock()

    def load(self) -> list[HistoryEntry]:
        """Return stored entries, or [] if the store is empty, unreadable or corrupt."""
        try:
            return self._read_entries()
        except PersistenceError as exc:
            logger.error("History unavailable, starting empty: %s", exc)
            return []

    def get(self, entry_id: str) -> HistoryEntry | None:
        for entry in self.load():
            if entry.id == entry_id:
                return entry
        return None

    def count(self) -> int:
        return len(self.load())

    def append(self, result: AnalysisResult) -> HistoryEntry:
        """Prepend a new entry, evict beyond capacity and persist.

        Raises PersistenceError if the new sequence could not be written.
        """
        with self._lock:
            try:
                entries = self._read_entries()
            except PersistenceError as exc:
                logger.warning("Discarding unreadable history before append: %s", exc)
                entries = []

            entry = HistoryEntry(id=self._next_id(entries), result=result)
            updated = [entry, *entries][: self.capacity]
            evicted = len(entries) + 1 - len(updated)
            self._write_entries(updated)

        if evicted:
            logger.info("History at capacity %d, evicted %d oldest entr%s", self.capacity, evicted, "y" if evicted == 1 else "ies")
        logger.info("Stored history entry %s for %s", entry.id, result.patient_name)
        return entry

    def _next_id(self, entries: list[HistoryEntry]) -> str:
        # Millisecond timestamps, bumped past the newest stored id so that two
        # appends in the same millisecond still get distinct, increasing ids.
        candidate = int(self._clock())
        for existing in entries:
            if existing.id.isdigit():
                candidate = max(candidate, int(existing.id) + 1)
                break
        return str(candidate)

    def _read_entries(self) -> list[HistoryEntry]:
        try:
            raw = self.store.get(self.key)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read history: {exc}") from exc
        if raw is None:
            return []
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"History is not valid JSON: {exc}") from exc
        if not isinstance(decoded, list):
            raise PersistenceError("History must be a JSON list")

        entries: list[HistoryEntry] = []
        for index, item in enumerate(decoded):
            try:
                entries.append(HistoryEntry.from_payload(item))
            except MalformedResult as exc:
                logger.warning("Skipping malformed history entry #%d: %s", index, exc)
        return entries

    def _write_entries(self, entries: list[HistoryEntry]) -> None:
        serialized = json.dumps([entry.to_payload() for entry in entries], ensure_ascii=True)
        try:
            self.store.set(self.key, serialized)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not write history: {exc}") from exc
