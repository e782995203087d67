# -*- coding: utf-8 -*-
"""State machine driving one upload-and-analyze attempt at a time."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import replace
from pathlib import Path
from typing import Any

from medtriage.core.history_cache import HistoryCache
from medtriage.errors import (
    JobBusyError,
    JobStateError,
    MalformedResult,
    PersistenceError,
    ServerError,
    TransportError,
)
from medtriage.integrations.analysis_client import AnalysisTransport
from medtriage.models.analysis_result import validate_result
from medtriage.models.scan_job import ErrorKind, JobStatus, ScanJob

logger = logging.getLogger(__name__)

StatusCallback = Callable[[ScanJob], None]

MALFORMED_MESSAGE = "The server returned an invalid analysis result."
CANCELLED_MESSAGE = "Upload cancelled."
CANCEL_POLL_SECONDS = 0.05


class _UploadCancelled(Exception):
    pass


class ScanJobController:
    """Drive Idle -> Selecting -> Uploading -> Succeeded/Failed.

    While a job is UPLOADING any further `submit` is rejected with
    JobBusyError. The UPLOADING state is held until the result has been
    committed to history, so commits never race each other.
    """

    def __init__(
        self,
        transport: AnalysisTransport,
        history: HistoryCache | None = None,
        on_status_changed: StatusCallback | None = None,
    ) -> None:
        self.transport = transport
        self.history = history
        self.on_status_changed = on_status_changed
        self._job = ScanJob()
        self._before_selection: ScanJob | None = None
        self._lock = threading.Lock()
        self._job_executor: ThreadPoolExecutor | None = None
        self._transport_executor: ThreadPoolExecutor | None = None

    @property
    def job(self) -> ScanJob:
        with self._lock:
            return self._job

    def select_file(self) -> ScanJob:
        """Enter SELECTING from IDLE or a terminal state."""
        with self._lock:
            current = self._job
            if current.status not in {JobStatus.IDLE, JobStatus.SUCCEEDED, JobStatus.FAILED}:
                raise JobStateError(f"Cannot select a file while {current.status.value}")
            self._before_selection = current
            job = self._set_job(ScanJob(status=JobStatus.SELECTING, file_name=current.file_name))
        self._notify(job)
        return job

    def cancel_selection(self) -> ScanJob:
        """Abort SELECTING and restore whatever state preceded it."""
        with self._lock:
            if self._job.status is not JobStatus.SELECTING:
                raise JobStateError(f"No file selection in progress ({self._job.status.value})")
            job = self._set_job(self._before_selection or ScanJob())
            self._before_selection = None
        self._notify(job)
        return job

    def reset(self) -> ScanJob:
        """Discard a finished job and return to IDLE."""
        with self._lock:
            if self._job.status is JobStatus.UPLOADING:
                raise JobBusyError("Cannot reset while an upload is in flight")
            job = self._set_job(ScanJob())
            self._before_selection = None
        self._notify(job)
        return job

    def submit(
        self,
        file_path: str | Path,
        file_name: str | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ScanJob:
        """Upload the selected file and block until the job is terminal."""
        path, name = self._begin_upload(file_path, file_name)
        return self._run_upload(path, name, cancel_event)

    def submit_in_background(
        self,
        file_path: str | Path,
        file_name: str | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Future:
        """Like `submit`, but the upload runs on a worker thread.

        The state check happens immediately, so a second call while the
        first is still uploading raises JobBusyError in the caller.
        """
        path, name = self._begin_upload(file_path, file_name)
        if self._job_executor is None:
            self._job_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="medtriage-job")
        return self._job_executor.submit(self._run_upload, path, name, cancel_event)

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        for executor in (self._job_executor, self._transport_executor):
            if executor is not None:
                executor.shutdown(wait=wait_for_tasks, cancel_futures=False)
        self._job_executor = None
        self._transport_executor = None

    def _begin_upload(self, file_path: str | Path, file_name: str | None) -> tuple[Path, str]:
        path = Path(file_path)
        name = file_name or path.name
        with self._lock:
            status = self._job.status
            if status is JobStatus.UPLOADING:
                raise JobBusyError(f"Upload of {self._job.file_name} is still in flight")
            if status is not JobStatus.SELECTING:
                raise JobStateError(f"Cannot submit while {status.value}; select a file first")
            self._before_selection = None
            job = self._set_job(ScanJob(status=JobStatus.UPLOADING, file_name=name))
        logger.info("Scan job uploading %s", name)
        self._notify(job)
        return path, name

    def _run_upload(self, path: Path, name: str, cancel_event: threading.Event | None) -> ScanJob:
        try:
            raw = self._call_transport(path, name, cancel_event)
            result = validate_result(raw)
        except _UploadCancelled:
            return self._fail(ErrorKind.CANCELLED, CANCELLED_MESSAGE)
        except ServerError as exc:
            return self._fail(ErrorKind.SERVER, exc.message)
        except TransportError as exc:
            return self._fail(ErrorKind.TRANSPORT, str(exc))
        except MalformedResult as exc:
            logger.warning("Rejected analysis response for %s: %s", name, exc)
            return self._fail(ErrorKind.MALFORMED, MALFORMED_MESSAGE)
        except Exception as exc:
            # Anything else from the collaborator must still release UPLOADING.
            logger.exception("Unexpected transport failure for %s", name)
            return self._fail(ErrorKind.TRANSPORT, str(exc) or exc.__class__.__name__)

        history_id = None
        if self.history is not None:
            try:
                history_id = self.history.append(result).id
            except PersistenceError as exc:
                logger.error("Scan for %s succeeded but could not be archived: %s", name, exc)
            except Exception:
                # Archiving never decides the outcome of a scan that already succeeded.
                logger.exception("Unexpected history failure while archiving %s", name)

        with self._lock:
            job = self._set_job(
                ScanJob(status=JobStatus.SUCCEEDED, file_name=name, result=result, history_id=history_id)
            )
        logger.info("Scan job succeeded for %s (%d findings)", name, len(result.findings))
        self._notify(job)
        return job

    def _call_transport(self, path: Path, name: str, cancel_event: threading.Event | None) -> Any:
        if cancel_event is None:
            return self.transport.analyze(path, name)
        if cancel_event.is_set():
            raise _UploadCancelled()
        if self._transport_executor is None:
            self._transport_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="medtriage-transport")
        future = self._transport_executor.submit(self.transport.analyze, path, name)
        while True:
            try:
                return future.result(timeout=CANCEL_POLL_SECONDS)
            except FutureTimeoutError:
                if cancel_event.is_set():
                    # The response, if it ever arrives, is dropped.
                    future.cancel()
                    raise _UploadCancelled() from None

    def _fail(self, kind: ErrorKind, message: str) -> ScanJob:
        with self._lock:
            job = self._set_job(replace(self._job, status=JobStatus.FAILED, error_kind=kind, error_message=message))
        logger.info("Scan job failed (%s): %s", kind.value, message)
        self._notify(job)
        return job

    def _set_job(self, job: ScanJob) -> ScanJob:
        self._job = job
        return job

    def _notify(self, job: ScanJob) -> None:
        if self.on_status_changed is None:
            return
        try:
            self.on_status_changed(job)
        except Exception:
            logger.exception("Status listener failed on %s", job.status.value)
