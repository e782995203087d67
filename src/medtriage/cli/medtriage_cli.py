# -*- coding: utf-8 -*-
"""Command line front end for scanning, history and reports."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from medtriage.config import load_config
from medtriage.core.session import AppSession
from medtriage.errors import RenderError
from medtriage.models.analysis_result import classify_risk
from medtriage.models.scan_job import JobStatus
from medtriage.pipeline.report_renderer import render_report

app = typer.Typer(help="MedTriage scan upload, history and report commands")
logger = logging.getLogger(__name__)

SETTINGS_OPTION = typer.Option(Path("settings.json"), "--settings", help="Path to settings.json")


def _open_session(settings_path: Path) -> AppSession:
    settings = load_config(settings_path)
    session = AppSession.from_settings(settings, base_dir=settings_path.resolve().parent)
    if settings.get("security", {}).get("require_unlock") and not session.auth_gate.unlock():
        typer.echo("MedTriage is locked.", err=True)
        raise typer.Exit(1)
    return session


@app.command()
def scan(
    file_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="DICOM or image file to analyze"),
    settings_path: Path = SETTINGS_OPTION,
) -> None:
    """Upload a scan, wait for the analysis and store it in history."""
    session = _open_session(settings_path)
    try:
        session.controller.select_file()
        typer.echo(f"Uploading {file_path.name} ...")
        job = session.controller.submit(file_path)
    finally:
        session.close()

    if job.status is not JobStatus.SUCCEEDED or job.result is None:
        typer.echo(f"Error: {job.error_message}", err=True)
        raise typer.Exit(1)

    result = job.result
    typer.echo(f"Patient: {result.patient_name}")
    typer.echo(f"Date:    {result.analysis_date}")
    typer.echo(f"Risk:    {classify_risk(result).value}")
    for finding in result.findings:
        typer.echo(f"  {finding.name:<20} {finding.score:5.1f}%  {finding.status.value}")
    if job.history_id:
        typer.echo(f"Saved to history as {job.history_id}")
    else:
        typer.echo("Warning: result could not be saved to history", err=True)


@app.command()
def history(settings_path: Path = SETTINGS_OPTION) -> None:
    """List stored results, most recent first."""
    session = _open_session(settings_path)
    entries = session.history.load()
    if not entries:
        typer.echo("No scans in history.")
        return
    for entry in entries:
        result = entry.result
        typer.echo(f"{entry.id}  {result.analysis_date:<12} {result.patient_name:<24} {classify_risk(result).value}")


@app.command()
def report(
    entry_id: str = typer.Argument(..., help="History entry id"),
    export_format: str = typer.Option(None, "--format", help="markdown or html (default from settings)"),
    settings_path: Path = SETTINGS_OPTION,
) -> None:
    """Export the report of a stored result."""
    session = _open_session(settings_path)
    entry = session.history.get(entry_id)
    if entry is None:
        typer.echo(f"No history entry {entry_id}", err=True)
        raise typer.Exit(1)
    try:
        written = session.exporter.export(render_report(entry.result), f"report_{entry.id}", export_format)
    except RenderError as exc:
        typer.echo(f"Report not exported: {exc}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Report saved to: {written['report']}")


@app.command()
def theme(
    toggle: bool = typer.Option(False, "--toggle", help="Switch between light and dark"),
    settings_path: Path = SETTINGS_OPTION,
) -> None:
    """Show or toggle the dark mode preference."""
    session = _open_session(settings_path)
    dark = session.theme.toggle() if toggle else session.theme.is_dark()
    typer.echo("dark" if dark else "light")


if __name__ == "__main__":
    app()
