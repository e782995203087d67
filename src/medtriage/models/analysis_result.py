# -*- coding: utf-8 -*-
"""Analysis result data model and response validation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from medtriage.constants import DETECTION_THRESHOLD, KNOWN_CONDITIONS, SCORE_MAX, SCORE_MIN
from medtriage.errors import MalformedResult
from medtriage.models.finding import Finding

logger = logging.getLogger(__name__)

IMAGE_KEYS = ("imageBase64", "imagePayload")


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    LOW = "LOW"


@dataclass(frozen=True)
class AnalysisResult:
    """Validated server response for one scan."""

    patient_name: str
    analysis_date: str
    findings: tuple[Finding, ...] = field(default_factory=tuple)
    image_payload: str = ""

    @property
    def primary_finding(self) -> Finding | None:
        return self.findings[0] if self.findings else None

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the service's field names."""
        return {
            "patientName": self.patient_name,
            "analysisDate": self.analysis_date,
            "findings": [finding.to_dict() for finding in self.findings],
            "imageBase64": self.image_payload,
        }


def _require_str(raw: Mapping[str, Any], key: str) -> str:
    if key not in raw:
        raise MalformedResult(f"Missing field: {key}")
    value = raw[key]
    if not isinstance(value, str):
        raise MalformedResult(f"Field {key} must be a string")
    return value


def _validate_finding(index: int, item: Any) -> Finding:
    if not isinstance(item, Mapping):
        raise MalformedResult(f"findings[{index}] must be an object")
    name = item.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedResult(f"findings[{index}].name must be a non-empty string")
    score = item.get("score")
    # bool is an int subclass but never a valid score
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise MalformedResult(f"findings[{index}].score must be a number")
    if not (SCORE_MIN <= float(score) <= SCORE_MAX):
        raise MalformedResult(f"findings[{index}].score {score} is outside {SCORE_MIN:g}..{SCORE_MAX:g}")
    if name not in KNOWN_CONDITIONS:
        logger.debug("Unknown condition label in response: %s", name)
    return Finding(name=name, score=float(score))


def validate_result(raw: Any) -> AnalysisResult:
    """Narrow an untyped response body into an AnalysisResult.

    Raises MalformedResult when a required field is absent or invalid.
    Unknown extra fields are ignored.
    """
    if not isinstance(raw, Mapping):
        raise MalformedResult("Analysis result must be a JSON object")

    patient_name = _require_str(raw, "patientName")
    analysis_date = _require_str(raw, "analysisDate")

    if "findings" not in raw:
        raise MalformedResult("Missing field: findings")
    findings_raw = raw["findings"]
    if not isinstance(findings_raw, (list, tuple)):
        raise MalformedResult("Field findings must be a list")
    findings = tuple(_validate_finding(index, item) for index, item in enumerate(findings_raw))

    image_key = next((key for key in IMAGE_KEYS if key in raw), None)
    if image_key is None:
        raise MalformedResult("Missing field: imageBase64")
    image_payload = raw[image_key]
    if not isinstance(image_payload, str):
        raise MalformedResult(f"Field {image_key} must be a string")

    return AnalysisResult(
        patient_name=patient_name,
        analysis_date=analysis_date,
        findings=findings,
        image_payload=image_payload,
    )


def classify_risk(result: AnalysisResult) -> RiskLevel:
    """Overall risk, gated by the primary (first) finding only.

    This deliberately ignores the remaining findings: a HIGH secondary
    finding does not raise the overall level. Results without findings
    are LOW.
    """
    primary = result.primary_finding
    if primary is None:
        return RiskLevel.LOW
    if primary.score > DETECTION_THRESHOLD:
        return RiskLevel.HIGH
    return RiskLevel.LOW
