# -*- coding: utf-8 -*-
"""Error taxonomy shared by the scan pipeline."""

from __future__ import annotations


class MedTriageError(Exception):
    """Base class for all library errors."""


class TransportError(MedTriageError):
    """Connectivity problem or timeout while talking to the analysis service."""


class ServerError(MedTriageError):
    """The analysis service answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class MalformedResult(MedTriageError, ValueError):
    """The response body does not describe a valid analysis result."""


class PersistenceError(MedTriageError):
    """History could not be read from or written to the key-value store."""


class RenderError(MedTriageError):
    """A report could not be generated or exported."""


class JobStateError(MedTriageError):
    """An operation was requested in a state that does not allow it."""


class JobBusyError(JobStateError):
    """A submit was requested while another upload is still in flight."""
