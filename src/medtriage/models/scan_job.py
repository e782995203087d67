# -*- coding: utf-8 -*-
"""Scan job state model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from medtriage.models.analysis_result import AnalysisResult


class JobStatus(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {JobStatus.SUCCEEDED, JobStatus.FAILED}


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    SERVER = "server"
    MALFORMED = "malformed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ScanJob:
    """Snapshot of the single in-flight upload-and-analyze attempt.

    `result` is set only when SUCCEEDED, `error_kind`/`error_message` only
    when FAILED. Never persisted.
    """

    status: JobStatus = JobStatus.IDLE
    file_name: str | None = None
    result: AnalysisResult | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    history_id: str | None = None
