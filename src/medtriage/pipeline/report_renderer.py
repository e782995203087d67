# -*- coding: utf-8 -*-
"""Turn an analysis result into a static report document."""

from __future__ import annotations

from medtriage.constants import REPORT_SUBTITLE, REPORT_TITLE
from medtriage.models.analysis_result import AnalysisResult
from medtriage.models.finding import classify_finding
from medtriage.models.report_document import (
    FindingRow,
    ImageBlock,
    PatientBlock,
    ReportDocument,
    ReportHeader,
)
from medtriage.utils.image_utils import split_data_uri


def format_score(score: float) -> str:
    return f"{score:.1f}%"


def render_report(result: AnalysisResult) -> ReportDocument:
    """Build the report document for one result.

    Pure: no I/O, and identical input always yields an equal document.
    """
    mime_type, data = split_data_uri(result.image_payload)
    rows = tuple(
        FindingRow(
            name=finding.name,
            score_text=format_score(finding.score),
            status=classify_finding(finding.score).value,
        )
        for finding in result.findings
    )
    return ReportDocument(
        header=ReportHeader(title=REPORT_TITLE, subtitle=REPORT_SUBTITLE),
        patient=PatientBlock(patient_name=result.patient_name, analysis_date=result.analysis_date),
        image=ImageBlock(mime_type=mime_type, data_base64=data),
        rows=rows,
    )
