# -*- coding: utf-8 -*-
"""HTTP client for the remote scan analysis service."""

from __future__ import annotations

import json
import logging
import socket
import uuid
from pathlib import Path
from typing import Any, Protocol
from urllib import error, request

from medtriage.errors import MalformedResult, ServerError, TransportError

logger = logging.getLogger(__name__)


class AnalysisTransport(Protocol):
    """Request/response contract consumed by the scan controller."""

    def analyze(self, file_path: Path, file_name: str) -> dict[str, Any]: ...


class AnalysisClient:
    """Upload one scan as multipart form data and return the JSON body."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 60.0,
        token: str = "",
        field_name: str = "file",
        content_type: str = "application/dicom",
    ) -> None:
        self.url = url
        self.timeout = float(timeout)
        self.token = token
        self.field_name = field_name
        self.content_type = content_type

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> AnalysisClient:
        api = settings.get("api", {})
        upload = settings.get("upload", {})
        token = str(api.get("token", "")).strip()
        return cls(
            str(api.get("url", "")),
            timeout=float(api.get("timeout_seconds", 60)),
            token="" if token == "USE_ENV_FILE" else token,
            field_name=str(upload.get("field_name", "file")),
            content_type=str(upload.get("content_type", "application/dicom")),
        )

    def build_multipart(self, file_bytes: bytes, file_name: str, boundary: str) -> bytes:
        body_parts = [
            f"--{boundary}\r\n".encode("utf-8"),
            (
                f'Content-Disposition: form-data; name="{self.field_name}"; filename="{file_name}"\r\n'
            ).encode("utf-8"),
            f"Content-Type: {self.content_type}\r\n\r\n".encode("utf-8"),
            file_bytes,
            b"\r\n",
            f"--{boundary}--\r\n".encode("utf-8"),
        ]
        return b"".join(body_parts)

    def analyze(self, file_path: Path, file_name: str) -> dict[str, Any]:
        """POST the file and return the decoded JSON object.

        Raises TransportError for connectivity problems, ServerError for
        non-2xx answers and MalformedResult for bodies that are not JSON.
        """
        try:
            file_bytes = Path(file_path).read_bytes()
        except OSError as exc:
            raise TransportError(f"Could not read {file_name}: {exc}") from exc

        boundary = uuid.uuid4().hex
        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        req = request.Request(
            self.url,
            data=self.build_multipart(file_bytes, file_name, boundary),
            headers=headers,
            method="POST",
        )

        logger.info("Uploading %s (%d bytes) to %s", file_name, len(file_bytes), self.url)
        try:
            with request.urlopen(req, timeout=self.timeout) as response:
                status = int(getattr(response, "status", 200))
                body = response.read().decode("utf-8", errors="ignore")
        except error.HTTPError as exc:
            err_body = exc.read().decode("utf-8", errors="ignore")
            message = self._error_message(err_body)
            logger.warning("Analysis service answered %s: %s", exc.code, message)
            raise ServerError(message, status=int(exc.code)) from exc
        except (error.URLError, socket.timeout, TimeoutError, ConnectionError) as exc:
            reason = getattr(exc, "reason", exc)
            raise TransportError(f"Could not reach analysis service: {reason}") from exc

        payload = self._decode_json(body)
        if not (200 <= status < 300):
            message = payload.get("message") if isinstance(payload, dict) else None
            raise ServerError(str(message or "Server Error"), status=status)
        if not isinstance(payload, dict):
            raise MalformedResult("Analysis service did not return a JSON object")
        logger.debug("Analysis response keys: %s", sorted(payload.keys()))
        return payload

    def _decode_json(self, body: str) -> Any:
        try:
            return json.loads(body) if body else {}
        except json.JSONDecodeError as exc:
            raise MalformedResult(f"Analysis service non-JSON response: {body[:200]}") from exc

    def _error_message(self, body: str) -> str:
        try:
            payload = json.loads(body) if body else {}
        except json.JSONDecodeError:
            payload = {}
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return "Server Error"
