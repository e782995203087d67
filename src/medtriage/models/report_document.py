# -*- coding: utf-8 -*-
"""Static report document structure."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ReportHeader:
    title: str
    subtitle: str


@dataclass(frozen=True)
class PatientBlock:
    patient_name: str
    analysis_date: str


@dataclass(frozen=True)
class ImageBlock:
    mime_type: str
    data_base64: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_base64}"


@dataclass(frozen=True)
class FindingRow:
    name: str
    score_text: str
    status: str


@dataclass(frozen=True)
class ReportDocument:
    """Everything an export collaborator needs to produce a shareable file."""

    header: ReportHeader
    patient: PatientBlock
    image: ImageBlock
    columns: tuple[str, ...] = ("Condition", "Score", "Status")
    rows: tuple[FindingRow, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": {"title": self.header.title, "subtitle": self.header.subtitle},
            "patient": {
                "patientName": self.patient.patient_name,
                "analysisDate": self.patient.analysis_date,
            },
            "image": {"mimeType": self.image.mime_type, "dataBase64": self.image.data_base64},
            "columns": list(self.columns),
            "rows": [
                {"name": row.name, "score": row.score_text, "status": row.status}
                for row in self.rows
            ],
        }
