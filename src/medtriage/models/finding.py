# -*- coding: utf-8 -*-
"""Finding data model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from medtriage.constants import DETECTION_THRESHOLD


class FindingStatus(str, Enum):
    DETECTED = "DETECTED"
    NORMAL = "NORMAL"


@dataclass(frozen=True)
class Finding:
    """One detected condition with its confidence score (0..100)."""

    name: str
    score: float

    @property
    def status(self) -> FindingStatus:
        return classify_finding(self.score)

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "score": self.score}


def classify_finding(score: float) -> FindingStatus:
    """Per-row label: DETECTED strictly above the threshold."""
    if score > DETECTION_THRESHOLD:
        return FindingStatus.DETECTED
    return FindingStatus.NORMAL
