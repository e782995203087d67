# -*- coding: utf-8 -*-
"""Tests for the HTTP analysis client."""

from __future__ import annotations

import io
import json
import socket
from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib import error

import pytest

from conftest import make_payload
from medtriage.errors import MalformedResult, ServerError, TransportError
from medtriage.integrations.analysis_client import AnalysisClient

URL = "http://127.0.0.1:5000/api/analysis"


def _response(body: bytes, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def _http_error(code: int, body: bytes) -> error.HTTPError:
    return error.HTTPError(URL, code, "error", {}, io.BytesIO(body))


def test_successful_upload_returns_json(sample_dicom: Path) -> None:
    body = json.dumps(make_payload()).encode("utf-8")
    with patch("medtriage.integrations.analysis_client.request.urlopen", return_value=_response(body)) as urlopen:
        payload = AnalysisClient(URL, timeout=5).analyze(sample_dicom, "chest_pa.dcm")

    assert payload["patientName"] == "J. Doe"
    req = urlopen.call_args.args[0]
    assert req.get_method() == "POST"
    assert req.full_url == URL
    assert b'name="file"; filename="chest_pa.dcm"' in req.data
    assert b"Content-Type: application/dicom" in req.data
    assert urlopen.call_args.kwargs["timeout"] == 5.0


def test_token_sent_as_bearer(sample_dicom: Path) -> None:
    body = json.dumps(make_payload()).encode("utf-8")
    with patch("medtriage.integrations.analysis_client.request.urlopen", return_value=_response(body)) as urlopen:
        AnalysisClient(URL, token="secret").analyze(sample_dicom, "a.dcm")
    assert urlopen.call_args.args[0].get_header("Authorization") == "Bearer secret"


def test_http_error_with_message_becomes_server_error(sample_dicom: Path) -> None:
    exc = _http_error(413, json.dumps({"message": "File too large"}).encode("utf-8"))
    with patch("medtriage.integrations.analysis_client.request.urlopen", side_effect=exc):
        with pytest.raises(ServerError) as caught:
            AnalysisClient(URL).analyze(sample_dicom, "a.dcm")
    assert caught.value.message == "File too large"
    assert caught.value.status == 413


def test_http_error_without_message_uses_default(sample_dicom: Path) -> None:
    with patch("medtriage.integrations.analysis_client.request.urlopen", side_effect=_http_error(500, b"<html>")):
        with pytest.raises(ServerError, match="Server Error"):
            AnalysisClient(URL).analyze(sample_dicom, "a.dcm")


def test_connection_failure_becomes_transport_error(sample_dicom: Path) -> None:
    exc = error.URLError(ConnectionRefusedError(111, "Connection refused"))
    with patch("medtriage.integrations.analysis_client.request.urlopen", side_effect=exc):
        with pytest.raises(TransportError):
            AnalysisClient(URL).analyze(sample_dicom, "a.dcm")


def test_timeout_becomes_transport_error(sample_dicom: Path) -> None:
    with patch("medtriage.integrations.analysis_client.request.urlopen", side_effect=socket.timeout("timed out")):
        with pytest.raises(TransportError):
            AnalysisClient(URL).analyze(sample_dicom, "a.dcm")


def test_non_json_body_is_malformed(sample_dicom: Path) -> None:
    with patch("medtriage.integrations.analysis_client.request.urlopen", return_value=_response(b"<html>ok</html>")):
        with pytest.raises(MalformedResult):
            AnalysisClient(URL).analyze(sample_dicom, "a.dcm")


def test_missing_file_is_transport_error(tmp_path: Path) -> None:
    with pytest.raises(TransportError):
        AnalysisClient(URL).analyze(tmp_path / "gone.dcm", "gone.dcm")


def test_from_settings_ignores_placeholder_token(default_config: dict) -> None:
    default_config["api"]["token"] = "USE_ENV_FILE"
    default_config["api"]["timeout_seconds"] = 12
    client = AnalysisClient.from_settings(default_config)
    assert client.token == ""
    assert client.timeout == 12.0
    assert client.field_name == "file"
