# -*- coding: utf-8 -*-
"""Write rendered reports to shareable files."""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import Any

from medtriage.errors import RenderError
from medtriage.models.report_document import ReportDocument
from medtriage.utils.file_utils import ensure_dir, write_text_file
from medtriage.utils.image_utils import write_payload_as_png

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("markdown", "html")


def _safe_stem(value: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", value).strip("._")
    return stem or "report"


class Exporter:
    """Export a ReportDocument as Markdown (with a PNG beside it) or HTML."""

    def __init__(self, output_dir: str | Path = "reports", export_format: str = "markdown") -> None:
        self.output_dir = Path(output_dir)
        self.export_format = export_format

    def export(self, document: ReportDocument, name: str, export_format: str | None = None) -> dict[str, Any]:
        """Write the report and return the produced paths.

        Raises RenderError; history is never touched here.
        """
        fmt = export_format or self.export_format
        if fmt not in SUPPORTED_FORMATS:
            raise RenderError(f"Unsupported export format: {fmt}")

        stem = _safe_stem(name)
        try:
            target_dir = ensure_dir(self.output_dir)
            if fmt == "html":
                report_path = write_text_file(target_dir / f"{stem}.html", self.to_html(document))
                image_path = None
            else:
                image_path, size = write_payload_as_png(
                    document.image.data_uri, target_dir / f"{stem}_scan.png"
                )
                logger.debug("Scan image written (%dx%d): %s", size[0], size[1], image_path)
                report_path = write_text_file(
                    target_dir / f"{stem}.md", self.to_markdown(document, image_path.name)
                )
        except ValueError as exc:
            logger.error("Report export failed for %s: %s", stem, exc)
            raise RenderError(f"Could not export report: {exc}") from exc
        except OSError as exc:
            logger.error("Report export failed for %s: %s", stem, exc)
            raise RenderError(f"Could not write report: {exc}") from exc

        logger.info("Report exported to %s", report_path)
        return {"report": report_path, "image": image_path, "format": fmt, "rows": len(document.rows)}

    def to_markdown(self, document: ReportDocument, image_ref: str) -> str:
        lines = [
            f"# {document.header.title}",
            f"_{document.header.subtitle}_",
            "",
            f"- **Patient:** {document.patient.patient_name}",
            f"- **Date:** {document.patient.analysis_date}",
            "",
            "## Scan Preview",
            f"![Scan]({image_ref})",
            "",
            "## AI Findings",
            "| " + " | ".join(document.columns) + " |",
            "| " + " | ".join("---" for _ in document.columns) + " |",
        ]
        for row in document.rows:
            lines.append(f"| {row.name} | {row.score_text} | {row.status} |")
        if not document.rows:
            lines.append("| (none) | - | - |")
        return "\n".join(lines) + "\n"

    def to_html(self, document: ReportDocument) -> str:
        esc = html.escape
        header_cells = "".join(f"<th>{esc(col)}</th>" for col in document.columns)
        body_rows = "".join(
            f'<tr class="{esc(row.status.lower())}"><td>{esc(row.name)}</td>'
            f"<td>{esc(row.score_text)}</td><td>{esc(row.status)}</td></tr>"
            for row in document.rows
        )
        return (
            "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
            f"<title>{esc(document.header.title)}</title></head><body>\n"
            f"<h1>{esc(document.header.title)}</h1>\n"
            f"<p>{esc(document.header.subtitle)}</p>\n"
            f"<p><b>Patient:</b> {esc(document.patient.patient_name)}<br>"
            f"<b>Date:</b> {esc(document.patient.analysis_date)}</p>\n"
            f'<img alt="Scan" src="{esc(document.image.data_uri, quote=True)}">\n'
            f"<table><thead><tr>{header_cells}</tr></thead><tbody>{body_rows}</tbody></table>\n"
            "</body></html>\n"
        )
