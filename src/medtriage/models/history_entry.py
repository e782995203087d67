# -*- coding: utf-8 -*-
"""History entry data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from medtriage.errors import MalformedResult
from medtriage.models.analysis_result import AnalysisResult, validate_result


@dataclass(frozen=True)
class HistoryEntry:
    """A persisted, uniquely identified analysis result."""

    id: str
    result: AnalysisResult

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}
        payload.update(self.result.to_payload())
        return payload

    @classmethod
    def from_payload(cls, raw: Any) -> HistoryEntry:
        """Rebuild an entry from its stored form; raises MalformedResult."""
        result = validate_result(raw)
        entry_id = raw.get("id")
        # Older stores kept the id as a plain millisecond number.
        if isinstance(entry_id, int) and not isinstance(entry_id, bool):
            entry_id = str(entry_id)
        if not isinstance(entry_id, str) or not entry_id:
            raise MalformedResult("History entry has no id")
        return cls(id=entry_id, result=result)
